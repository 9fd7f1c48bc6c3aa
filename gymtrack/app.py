from flask import Flask, request, jsonify
import psycopg2
import psycopg2.extras  # For RealDictCursor
import psycopg2.pool
import os
from urllib.parse import urlparse
import logging
import jwt # For decoding bearer tokens issued by the client application
from functools import wraps # For creating decorators
import atexit
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

app = Flask(__name__)

# --- Logging ---
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
# Use app.logger directly as it's configured by Flask
logger = app.logger

# --- Rate Limiter Configuration ---
# Point at Redis (e.g. redis://localhost:6379/1) when running more than one worker
RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per day", "200 per hour"],
    storage_uri=RATELIMIT_STORAGE_URL,
    strategy="fixed-window",
)
limiter.init_app(app)


# --- Database Connection Pool Configuration ---
MIN_DB_CONNECTIONS = 1
MAX_DB_CONNECTIONS = 10
db_pool = None

def get_db_connection_params():
    """Determines database connection parameters."""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        try:
            url = urlparse(database_url)
            return {
                'dbname': url.path[1:],
                'user': url.username,
                'password': url.password,
                'host': url.hostname,
                'port': url.port
            }
        except ValueError as e:
            app.logger.error(f"Failed to parse DATABASE_URL: {e}. Falling back to POSTGRES_* vars.")

    return {
        'dbname': os.getenv("POSTGRES_DB"),
        'user': os.getenv("POSTGRES_USER"),
        'password': os.getenv("POSTGRES_PASSWORD"),
        'host': os.getenv("POSTGRES_HOST"),
        'port': os.getenv("POSTGRES_PORT", "5432")
    }

def init_db_pool():
    """Initializes the database connection pool."""
    global db_pool
    if db_pool is None:
        params = get_db_connection_params()
        if not all(params.values()):
            # The calculator and voice endpoints don't need a database, so keep serving them
            app.logger.error("Database connection parameters are incomplete. Pool not initialized.")
            return

        try:
            app.logger.info(f"Initializing database connection pool for host '{params.get('host')}' db '{params.get('dbname')}'")
            db_pool = psycopg2.pool.SimpleConnectionPool(
                MIN_DB_CONNECTIONS,
                MAX_DB_CONNECTIONS,
                **params
            )
            app.logger.info("Database connection pool initialized successfully.")
        except psycopg2.OperationalError as e:
            app.logger.error(f"Failed to initialize database pool: {e}")
            raise

init_db_pool() # Initialize the pool when the app module is loaded

@atexit.register
def close_db_pool():
    global db_pool
    if db_pool:
        app.logger.info("Closing database connection pool.")
        db_pool.closeall()
        db_pool = None

# --- JWT Configuration ---
# Tokens are issued by the client application with the same shared secret
app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY')


# --- Database Connection Helper ---
def get_db_connection():
    """Gets a connection from the database pool."""
    global db_pool
    if db_pool is None:
        logger.error("Database pool is not initialized. Attempting to re-initialize.")
        init_db_pool()
        if db_pool is None:
             logger.critical("Failed to re-initialize database pool. Cannot get connection.")
             raise psycopg2.pool.PoolError("Database pool not available.")
    try:
        return db_pool.getconn()
    except psycopg2.pool.PoolError as e:
        logger.error(f"Failed to get connection from pool: {e}")
        raise

def release_db_connection(conn):
    """Releases a connection back to the database pool."""
    global db_pool
    if db_pool and conn:
        try:
            db_pool.putconn(conn)
        except psycopg2.pool.PoolError as e:
            logger.error(f"Error releasing connection back to pool: {e}")


# --- JWT Required Decorator ---
def jwt_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from flask import g

        token = None
        if 'Authorization' in request.headers:
            auth_header = request.headers['Authorization']
            parts = auth_header.split()
            if len(parts) == 2 and parts[0].lower() == 'bearer':
                token = parts[1]
            elif len(parts) == 1: # Handle cases where 'Bearer' prefix might be missing by mistake
                token = parts[0]

        if not token:
            logger.warning("JWT token is missing")
            return jsonify(message="Authentication token is missing!"), 401

        if not app.config.get('JWT_SECRET_KEY'):
            logger.error("JWT_SECRET_KEY is not configured; rejecting authenticated request.")
            return jsonify(message="Authentication is not configured."), 500

        try:
            data = jwt.decode(token, app.config['JWT_SECRET_KEY'], algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token has expired")
            return jsonify(message="Your token has expired. Please log in again."), 401
        except jwt.InvalidTokenError as e:
            logger.error(f"Invalid JWT token: {e}")
            return jsonify(message="Invalid token. Please log in again."), 401

        if 'user_id' not in data:
            logger.error("user_id not in JWT data after decoding.")
            return jsonify(message="Invalid token: missing user_id"), 401

        g.decoded_token_data = data
        g.current_user_id = str(data['user_id'])

        return f(*args, **kwargs)
    return decorated_function


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic exception handler."""
    # Let Flask/werkzeug render 404s, 405s and limiter 429s as usual
    if isinstance(e, HTTPException):
        return e
    app.logger.error(f"Unhandled exception: {e}", exc_info=True)
    if isinstance(e, psycopg2.pool.PoolError):
        return jsonify(error="Database pool error"), 503
    if isinstance(e, psycopg2.OperationalError):
        return jsonify(error="Database connection error"), 503
    return jsonify(error="An internal server error occurred"), 500


@app.route('/health', methods=['GET'])
@limiter.exempt
def health():
    return jsonify(status="ok", database=db_pool is not None), 200


# Import blueprints after pool initialization and app context is more stable
from .blueprints.calculator import calculator_bp  # noqa: E402
from .blueprints.warmup_settings import warmup_settings_bp  # noqa: E402

app.register_blueprint(calculator_bp)
app.register_blueprint(warmup_settings_bp)
