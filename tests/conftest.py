from pathlib import Path
import pytest


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def sample_gpx_text(sample_gpx_path) -> str:
    return sample_gpx_path.read_text(encoding="utf-8")


def make_gpx(points, *, name=None, namespace="http://www.topografix.com/GPX/1/1") -> str:
    """
    Build a GPX document from (lat, lon, ele, time) tuples.
    `ele` and `time` may be None to leave the child element out.
    """
    xmlns = f' xmlns="{namespace}"' if namespace else ""
    trkpts = []
    for lat, lon, ele, time in points:
        children = ""
        if ele is not None:
            children += f"<ele>{ele}</ele>"
        if time is not None:
            children += f"<time>{time}</time>"
        trkpts.append(f'<trkpt lat="{lat}" lon="{lon}">{children}</trkpt>')
    name_el = f"<name>{name}</name>" if name else ""
    return (
        f'<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<gpx version="1.1" creator="test"{xmlns}>'
        f"<trk>{name_el}<trkseg>{''.join(trkpts)}</trkseg></trk></gpx>"
    )


@pytest.fixture
def gpx_factory():
    return make_gpx
