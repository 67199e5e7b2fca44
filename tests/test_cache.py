from src.geodist.models.domain import Coordinates
from src.geodist.services.cache import ResultCache, SessionCache, route_cache_key


def test_result_cache_get_put():
    cache: ResultCache[str, Coordinates] = ResultCache()

    assert cache.get("Paris") is None
    cache.put("Paris", Coordinates(48.8566, 2.3522))

    assert cache.get("Paris") == Coordinates(48.8566, 2.3522)
    assert "Paris" in cache
    assert "paris" not in cache  # keys are case-sensitive
    assert len(cache) == 1


def test_session_cache_tables_are_independent():
    first = SessionCache()
    second = SessionCache()
    first.geocodes.put("Goa", Coordinates(15.2993, 74.124))

    assert len(first.geocodes) == 1
    assert len(first.routes) == 0
    assert len(second.geocodes) == 0


def test_route_cache_key_rounds_to_four_decimals():
    key = route_cache_key(28.61391, 77.20904, 15.29932, 74.12398)

    assert key == "28.6139,77.2090-15.2993,74.1240"
    assert route_cache_key(28.613949, 77.209, 15.2993, 74.124) == key
    assert route_cache_key(28.6141, 77.209, 15.2993, 74.124) != key
