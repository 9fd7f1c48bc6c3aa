import math

from flask import Blueprint, request, jsonify
from ..app import limiter, logger
from gymtrack.warmups import (
    WeightUnit,
    WarmupSettings,
    generate_warmup_sets,
    calculate_plate_loading,
    estimate_one_rm,
    is_compound_lift,
)
from gymtrack.voice_parser import parse_set_input
from gymtrack.constants import DEFAULT_NUMBER_OF_WARMUPS

calculator_bp = Blueprint('calculator', __name__)


def _finite_float(value, key):
    if isinstance(value, bool):
        raise ValueError(f"'{key}' must be numeric")
    try:
        number = float(value)
    except OverflowError:
        raise ValueError(f"'{key}' is too large")
    # Python's JSON decoder accepts NaN and Infinity, and float() accepts "inf"
    if not math.isfinite(number):
        raise ValueError(f"'{key}' must be a finite number")
    return number


def _optional_float(data, key):
    value = data.get(key)
    if value is None:
        return None
    return _finite_float(value, key)


def _parse_weight_unit(value):
    """Strict unit lookup for request payloads; None means pounds."""
    if value is None:
        return WeightUnit.POUNDS
    try:
        return WeightUnit(value)
    except ValueError:
        raise ValueError(f"Unknown weight_unit '{value}'. Use 'lbs' or 'kg'.")


def parse_warmup_settings(data):
    """Builds WarmupSettings from a JSON payload. Raises ValueError/TypeError on bad input."""
    number_of_warmups = data.get('number_of_warmups', DEFAULT_NUMBER_OF_WARMUPS)
    if isinstance(number_of_warmups, bool) or not isinstance(number_of_warmups, int):
        raise ValueError("'number_of_warmups' must be an integer")

    use_fine_increments = data.get('use_fine_increments', False)
    if not isinstance(use_fine_increments, bool):
        raise ValueError("'use_fine_increments' must be a boolean")

    return WarmupSettings(
        number_of_warmups=number_of_warmups,
        weight_unit=_parse_weight_unit(data.get('weight_unit')),
        use_fine_increments=use_fine_increments,
        bar_weight=_optional_float(data, 'bar_weight'),
        estimated_one_rm=_optional_float(data, 'estimated_one_rm'),
    )


@calculator_bp.route('/v1/warmups/generate', methods=['POST'])
@limiter.limit("120 per minute")
def generate_warmups():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'working_weight' not in data:
        return jsonify(error="Missing 'working_weight' in request body"), 400

    try:
        working_weight = _optional_float(data, 'working_weight')
        settings = parse_warmup_settings(data)
    except (ValueError, TypeError) as e:
        return jsonify(error=f"Invalid warm-up request: {e}"), 400

    if working_weight is None:
        return jsonify(error="'working_weight' must be numeric"), 400

    warmup_sets = generate_warmup_sets(working_weight, settings)
    return jsonify({
        "working_weight": working_weight,
        "weight_unit": settings.weight_unit.value,
        "increment": settings.increment,
        "warmup_sets": [s.to_dict() for s in warmup_sets],
    }), 200


@calculator_bp.route('/v1/plates/calculate', methods=['POST'])
@limiter.limit("120 per minute")
def calculate_plates():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'target_weight' not in data:
        return jsonify(error="Missing 'target_weight' in request body"), 400

    try:
        target_weight = _optional_float(data, 'target_weight')
        bar_weight = _optional_float(data, 'bar_weight')
        unit = _parse_weight_unit(data.get('weight_unit'))
        available_plates = data.get('available_plates')
        if available_plates is not None:
            if not isinstance(available_plates, list):
                raise ValueError("'available_plates' must be a list of numbers")
            available_plates = [_finite_float(p, 'available_plates') for p in available_plates]
    except (ValueError, TypeError) as e:
        return jsonify(error=f"Invalid plate request: {e}"), 400

    if target_weight is None:
        return jsonify(error="'target_weight' must be numeric"), 400

    result = calculate_plate_loading(
        target_weight,
        bar_weight=bar_weight,
        available_plates=available_plates,
        unit=unit,
    )
    response = result.to_dict()
    response["target_weight"] = target_weight
    response["weight_unit"] = unit.value
    return jsonify(response), 200


@calculator_bp.route('/v1/one-rm', methods=['GET'])
@limiter.limit("120 per minute")
def one_rm_estimate():
    weight_arg = request.args.get('weight')
    reps_arg = request.args.get('reps')
    if weight_arg is None or reps_arg is None:
        return jsonify(error="Missing 'weight' or 'reps' query parameter"), 400

    try:
        weight = _finite_float(weight_arg, 'weight')
        reps = int(reps_arg)
    except ValueError:
        return jsonify(error="Invalid 'weight' or 'reps' format. Must be numeric."), 400

    return jsonify({
        "weight_input": weight,
        "reps_input": reps,
        "estimated_1rm": round(estimate_one_rm(weight, reps), 2),
    }), 200


@calculator_bp.route('/v1/exercises/compound', methods=['GET'])
def compound_lift_check():
    name = request.args.get('name', '').strip()
    if not name:
        return jsonify(error="Missing 'name' query parameter"), 400
    return jsonify(name=name, is_compound=is_compound_lift(name)), 200


@calculator_bp.route('/v1/voice/parse-set', methods=['POST'])
@limiter.limit("60 per minute") # One call per finalized utterance
def parse_voice_set():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'text' not in data:
        return jsonify(error="Missing 'text' in request body"), 400
    text = data['text']
    if not isinstance(text, str):
        return jsonify(error="'text' must be a string"), 400

    parsed = parse_set_input(text)
    if parsed.is_empty:
        logger.info(f"Could not parse weight or reps from utterance: '{text}'")
    return jsonify(parsed.to_dict()), 200
