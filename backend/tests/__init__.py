"""
Test suite for the safe route backend.

This package contains:
- test_geo.py: Geometry kernel (distances, local projection, segments)
- test_zone_service.py / test_zone_intersection.py: Zone loading and hit tests
- test_route_scorer.py / test_detour_service.py: Penalties and detour waypoints
- test_safe_route_service.py: Zone-avoidance search with a mocked router
- test_osrm_routing_service.py: OSRM adapter with mocked requests.get
- test_route_api.py: Flask endpoints

Run tests:
    cd backend
    source venv/bin/activate
    python -m pytest tests/
"""
