import math

from flask import Blueprint, request, jsonify, g
from ..app import get_db_connection, release_db_connection, jwt_required, logger
import psycopg2
import psycopg2.extras
import psycopg2.pool
from gymtrack.warmups import (
    WeightUnit,
    WarmupSettings,
    generate_warmup_sets,
    is_compound_lift,
)
from gymtrack.constants import WARMUP_FORMULAS

warmup_settings_bp = Blueprint('warmup_settings', __name__)


WORKOUT_EXERCISE_QUERY = """
    SELECT we.id, we.enable_warmups, we.warmup_count, we.working_weight, we.weight_unit,
           we.use_fine_increments, we.estimated_1rm, we.bar_weight,
           e.name AS exercise_name, w.user_id
    FROM workout_exercises we
    JOIN workouts w ON we.workout_id = w.id
    LEFT JOIN exercises e ON we.exercise_id = e.id
    WHERE we.id = %s;
"""


def _as_float(value):
    return float(value) if value is not None else None


def warmups_enabled(row):
    """Stored flag if set, otherwise compound lifts get warm-ups by default."""
    if row['enable_warmups'] is None:
        return is_compound_lift(row.get('exercise_name'))
    return bool(row['enable_warmups'])


def settings_from_row(row):
    """Maps a workout_exercises row to WarmupSettings. A stored 1RM of 0 means none."""
    estimated_1rm = _as_float(row['estimated_1rm']) or 0.0
    return WarmupSettings(
        number_of_warmups=int(row['warmup_count']),
        weight_unit=WeightUnit.parse(row['weight_unit']),
        use_fine_increments=bool(row['use_fine_increments']),
        bar_weight=_as_float(row['bar_weight']),
        estimated_one_rm=estimated_1rm if estimated_1rm > 0 else None,
    )


def serialize_warmup_config(row):
    settings = settings_from_row(row)
    working_weight = _as_float(row['working_weight']) or 0.0
    if working_weight > 0:
        formatted_working_weight = f"{working_weight:.1f} {settings.weight_unit.value}"
    else:
        formatted_working_weight = "—"
    return {
        "workout_exercise_id": str(row['id']),
        "exercise_name": row.get('exercise_name'),
        "enable_warmups": warmups_enabled(row),
        "warmup_count": settings.number_of_warmups,
        "working_weight": working_weight,
        "formatted_working_weight": formatted_working_weight,
        "weight_unit": settings.weight_unit.value,
        "use_fine_increments": settings.use_fine_increments,
        "estimated_1rm": settings.estimated_one_rm,
        "bar_weight": settings.bar_weight,
    }


def _load_owned_workout_exercise(cur, workout_exercise_id):
    """Returns (row, error_response). Exactly one of them is None."""
    cur.execute(WORKOUT_EXERCISE_QUERY, (str(workout_exercise_id),))
    row = cur.fetchone()
    if not row:
        return None, (jsonify(error="Workout exercise not found."), 404)
    if str(row['user_id']) != g.current_user_id:
        logger.warning(f"Forbidden attempt to access workout exercise {workout_exercise_id} by user {g.current_user_id}")
        return None, (jsonify(error="Forbidden. You can only access your own workouts."), 403)
    return row, None


def _validate_settings_update(data):
    """Checks a PUT payload and returns the column values to write. Raises ValueError."""
    updates = {}

    if 'enable_warmups' in data:
        if not isinstance(data['enable_warmups'], bool):
            raise ValueError("'enable_warmups' must be a boolean")
        updates['enable_warmups'] = data['enable_warmups']

    if 'warmup_count' in data:
        count = data['warmup_count']
        if isinstance(count, bool) or not isinstance(count, int) or count not in WARMUP_FORMULAS:
            raise ValueError(f"'warmup_count' must be one of {sorted(WARMUP_FORMULAS)}")
        updates['warmup_count'] = count
        # Picking a warm-up count turns warm-ups on unless the caller says otherwise
        updates.setdefault('enable_warmups', True)

    if 'weight_unit' in data:
        try:
            updates['weight_unit'] = WeightUnit(data['weight_unit']).value
        except ValueError:
            raise ValueError("'weight_unit' must be 'lbs' or 'kg'")

    if 'use_fine_increments' in data:
        if not isinstance(data['use_fine_increments'], bool):
            raise ValueError("'use_fine_increments' must be a boolean")
        updates['use_fine_increments'] = data['use_fine_increments']

    for field in ('working_weight', 'estimated_1rm', 'bar_weight'):
        if field not in data:
            continue
        value = data[field]
        if value is None:
            # Cleared: working weight and 1RM are stored as 0, bar weight as NULL
            updates[field] = None if field == 'bar_weight' else 0.0
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"'{field}' must be numeric")
        try:
            number = float(value)
        except OverflowError:
            raise ValueError(f"'{field}' is too large")
        if not math.isfinite(number):
            raise ValueError(f"'{field}' must be a finite number")
        if number < 0:
            raise ValueError(f"'{field}' must not be negative")
        updates[field] = number

    return updates


@warmup_settings_bp.route('/v1/workout-exercises/<uuid:workout_exercise_id>/warmup-settings', methods=['GET'])
@jwt_required
def get_warmup_settings(workout_exercise_id):
    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            row, error_response = _load_owned_workout_exercise(cur, workout_exercise_id)
            if error_response:
                return error_response
            return jsonify(serialize_warmup_config(row)), 200
    except psycopg2.pool.PoolError as e:
        logger.error(f"No database connection for warm-up settings of {workout_exercise_id}: {e}")
        return jsonify(error="Database unavailable"), 503
    except psycopg2.Error as e:
        logger.error(f"Database error fetching warm-up settings for {workout_exercise_id}: {e}", exc_info=True)
        return jsonify(error="Database operation failed"), 500
    finally:
        if conn:
            release_db_connection(conn)


@warmup_settings_bp.route('/v1/workout-exercises/<uuid:workout_exercise_id>/warmup-settings', methods=['PUT'])
@jwt_required
def update_warmup_settings(workout_exercise_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Request body must be JSON"), 400

    try:
        updates = _validate_settings_update(data)
    except ValueError as ve:
        return jsonify(error=f"Invalid warm-up settings: {ve}"), 400

    if not updates:
        return jsonify(error="No updatable warm-up fields provided"), 400

    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            row, error_response = _load_owned_workout_exercise(cur, workout_exercise_id)
            if error_response:
                return error_response

            # Column names come from _validate_settings_update, never from the payload
            set_clause = ", ".join(f"{column} = %s" for column in updates)
            cur.execute(
                f"UPDATE workout_exercises SET {set_clause}, updated_at = NOW() WHERE id = %s;",
                tuple(updates.values()) + (str(workout_exercise_id),)
            )
            conn.commit()

            row = dict(row)
            row.update(updates)
            logger.info(f"Updated warm-up settings for workout exercise {workout_exercise_id}: {sorted(updates)}")
            return jsonify(serialize_warmup_config(row)), 200
    except psycopg2.pool.PoolError as e:
        logger.error(f"No database connection for warm-up settings of {workout_exercise_id}: {e}")
        return jsonify(error="Database unavailable"), 503
    except psycopg2.Error as e:
        logger.error(f"Database error updating warm-up settings for {workout_exercise_id}: {e}", exc_info=True)
        if conn:
            conn.rollback()
        return jsonify(error="Database operation failed"), 500
    finally:
        if conn:
            release_db_connection(conn)


@warmup_settings_bp.route('/v1/workout-exercises/<uuid:workout_exercise_id>/warmup-sets', methods=['GET'])
@jwt_required
def get_warmup_sets(workout_exercise_id):
    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            row, error_response = _load_owned_workout_exercise(cur, workout_exercise_id)
            if error_response:
                return error_response
    except psycopg2.pool.PoolError as e:
        logger.error(f"No database connection for warm-up sets of {workout_exercise_id}: {e}")
        return jsonify(error="Database unavailable"), 503
    except psycopg2.Error as e:
        logger.error(f"Database error fetching warm-up sets for {workout_exercise_id}: {e}", exc_info=True)
        return jsonify(error="Database operation failed"), 500
    finally:
        if conn:
            release_db_connection(conn)

    enabled = warmups_enabled(row)
    working_weight = _as_float(row['working_weight']) or 0.0
    warmup_sets = []
    if enabled and working_weight > 0:
        warmup_sets = generate_warmup_sets(working_weight, settings_from_row(row))

    return jsonify({
        "workout_exercise_id": str(row['id']),
        "enable_warmups": enabled,
        "working_weight": working_weight,
        "weight_unit": WeightUnit.parse(row['weight_unit']).value,
        "warmup_sets": [s.to_dict() for s in warmup_sets],
    }), 200
