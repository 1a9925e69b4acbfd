from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
import logging
import threading
from dotenv import load_dotenv
from config import get_config
from services.zone_service import ZoneService
from services.osrm_routing_service import OSRMRoutingService
from services.safe_route_service import SafeRouteService
from services.risk_score_service import RiskScoreService
from services.routing_errors import InvalidInputError, NoRouteFoundError, RoutingCancelledError
from utils.distance import get_cache_info
from utils.validators import RouteRequestValidator
from utils.secure_logging import redact_point

load_dotenv()

logging.basicConfig(level=logging.INFO)

app = Flask(__name__)
logger = logging.getLogger(__name__)
app_config = get_config()

app.config['SECRET_KEY'] = app_config.SECRET_KEY

# Route requests are tiny JSON bodies
app.config['MAX_CONTENT_LENGTH'] = 64 * 1024  # 64 KB

# CORS Configuration - Environment-aware origin restriction
if os.getenv('FLASK_ENV') == 'production':
    # Production: Only allow explicitly configured frontend URL
    FRONTEND_URL = os.getenv('FRONTEND_URL')
    if not FRONTEND_URL:
        raise ValueError("FRONTEND_URL must be set in production environment")
    ALLOWED_ORIGINS = [FRONTEND_URL]
else:
    ALLOWED_ORIGINS = list(app_config.CORS_ORIGINS) + [
        'http://127.0.0.1:3000',
        'http://localhost:5173'
    ]

# Remove empty strings
ALLOWED_ORIGINS = [origin for origin in ALLOWED_ORIGINS if origin]

CORS(app, origins=ALLOWED_ORIGINS)


# Security Headers Middleware
@app.after_request
def set_security_headers(response):
    """
    Add security headers to all responses.

    - HSTS: Forces HTTPS for 1 year (only in production)
    - X-Frame-Options: Prevents clickjacking
    - X-Content-Type-Options: Prevents MIME sniffing
    - CSP: The API serves JSON only
    """
    if os.getenv('FLASK_ENV') == 'production':
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

    return response


# Rate Limiting Configuration
# Set REDIS_URL to share limits across multiple servers
app.config['RATELIMIT_ENABLED'] = app_config.RATE_LIMIT_ENABLED
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=["500 per day", "100 per hour"],
    storage_uri=app_config.RATE_LIMIT_STORAGE_URI
)

# Initialize services
# Zones are loaded once here and handed to each service; a missing zone file
# leaves the API running with no zones.
zone_service = ZoneService(app_config.HIGHRISK_ZONES_PATH)
osrm_service = OSRMRoutingService(
    base_url=app_config.OSRM_SERVER,
    timeout=app_config.ROUTER_TIMEOUT_SECONDS
)
safe_route_service = SafeRouteService(osrm_service, zone_service.zones)
risk_score_service = RiskScoreService(zone_service.zones)


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'safe-route-api',
        'zones_loaded': len(zone_service.zones),
        'distance_cache': get_cache_info()
    })


@app.route('/api/highrisk', methods=['GET'])
@limiter.limit("200 per hour")
def get_high_risk_zones():
    """
    List the configured high-risk zones.

    Returns:
        200: [{name, lat, lng, radius, risk, type}, ...]
    """
    return jsonify(zone_service.to_dicts()), 200


# ================================================================================
# SAFE ROUTE NAVIGATION - ROUTE CALCULATION ENDPOINT
# ================================================================================

@app.route('/api/route', methods=['POST'])
@limiter.limit("120 per hour")
@limiter.limit("10 per minute")  # Each request can fan out to several router calls
def calculate_route():
    """
    Calculate a route that avoids high-risk zones.

    Request Body:
        startLat, startLng (float): Trip start (required)
        endLat, endLng (float): Trip end (required)
        mode (str, optional): 'safe' (default), 'fastest' or 'shortest'
        profile (str, optional): Router travel profile (default: 'driving')

    Returns:
        200: {
                safe: bool,
                note: str,
                usedWaypoints: [{lat, lng}],
                route: [{lat, lng}],
                distanceMeters: float,
                durationSeconds: float,
                riskPenalty: float
            }
        400: Invalid parameters
        404: No route could be found
        504: Route search exceeded ROUTE_DEADLINE_SECONDS
        500: Server error
    """
    try:
        params = RouteRequestValidator.parse_route_request(
            request.get_json(silent=True),
            default_profile=app_config.DEFAULT_PROFILE
        )

        # Deadline for the whole search; the in-flight router call is dropped when it fires
        cancel_event = threading.Event()
        deadline = threading.Timer(app_config.ROUTE_DEADLINE_SECONDS, cancel_event.set)
        deadline.daemon = True
        deadline.start()
        try:
            result = safe_route_service.calculate_route(
                params['start'],
                params['end'],
                mode=params['mode'],
                profile=params['profile'],
                cancel_event=cancel_event
            )
        finally:
            deadline.cancel()
        return jsonify(result), 200

    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except NoRouteFoundError as e:
        return jsonify({
            'error': str(e),
            'details': 'The routing service returned no route between these points. Check that both points are near a road.'
        }), 404
    except RoutingCancelledError:
        logger.warning(f"Route calculation exceeded {app_config.ROUTE_DEADLINE_SECONDS}s deadline")
        return jsonify({'error': 'Route calculation timed out'}), 504
    except Exception as e:
        logger.error(f"Error calculating route: {e}", exc_info=True)
        return jsonify({'error': 'Failed to calculate route'}), 500


@app.route('/api/ai/risk', methods=['POST'])
@limiter.limit("300 per hour")
def score_risk():
    """
    Risk score for a location or itinerary.

    Request Body:
        lat, lng (float): Location to score
        itinerary (list, optional): [{lat, lng}, ...] scored instead of lat/lng

    Returns:
        200: {riskScore: int 0-100, reasons: [str], zones: [str], stops?: [...]}
        400: Invalid parameters
        500: Server error
    """
    try:
        data = request.get_json(silent=True)
        points = RouteRequestValidator.parse_risk_request(data)

        if data.get('itinerary'):
            result = risk_score_service.score_itinerary(points)
        else:
            result = risk_score_service.score_location(points[0])
            logger.info(f"Risk score {result['riskScore']} for {redact_point(points[0])}")

        return jsonify(result), 200

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error scoring risk: {e}", exc_info=True)
        return jsonify({'error': 'Failed to score risk'}), 500


# ===== ERROR HANDLERS =====

@app.errorhandler(413)
def request_entity_too_large(error):
    """
    Handle requests that exceed MAX_CONTENT_LENGTH.

    Returns:
        413: Payload too large error
    """
    return jsonify({
        'error': 'Request payload too large',
        'max_size': '64 KB'
    }), 413


@app.errorhandler(400)
def bad_request(error):
    """
    Handle malformed requests.

    Returns:
        400: Bad request error
    """
    return jsonify({
        'error': 'Bad request',
        'message': str(error)
    }), 400


@app.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Not found'}), 404


@app.errorhandler(405)
def method_not_allowed(error):
    return jsonify({'error': 'Method not allowed'}), 405


if __name__ == '__main__':
    # Use environment variable to control debug mode (defaults to False for production)
    debug_mode = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    app.run(debug=debug_mode, host='0.0.0.0', port=int(os.getenv('PORT', '4000')))
