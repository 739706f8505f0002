"""JSON endpoints for habits and their streak logs."""

from flask import Blueprint, jsonify, request

from trackhabit.errors import ResourceNotFoundError, ValidationError
from trackhabit.services.container import container

habits_bp = Blueprint('habits', __name__)

def _habits():
    return container().get('habit_repository')

def _logs():
    return container().get('habit_log_repository')

def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data

def _habit_or_404(habit_id):
    habit = _habits().get_by_id(habit_id)
    if habit is None:
        raise ResourceNotFoundError(f"Habit {habit_id} not found")
    return habit

@habits_bp.route('/habits', methods=['GET'])
def list_habits():
    """List habits, sorted by ``sort`` (created|name) in ``order`` (asc|desc)."""
    sort_by = request.args.get('sort', 'created')
    order = request.args.get('order', 'asc').lower()
    if order not in ('asc', 'desc'):
        raise ValidationError(f"Invalid sort order '{order}'")
    include_inactive = request.args.get('include_inactive', 'true').lower() == 'true'

    habits = _habits().get_all(
        sort_by=sort_by,
        ascending=order == 'asc',
        include_inactive=include_inactive,
    )
    return jsonify({'success': True, 'data': [habit.to_dict() for habit in habits]})

@habits_bp.route('/habits', methods=['POST'])
def create_habit():
    data = _payload()
    habit = _habits().insert(data.get('name'))
    return jsonify({'success': True, 'data': habit.to_dict()}), 201

@habits_bp.route('/habits/<int:habit_id>', methods=['GET'])
def get_habit(habit_id):
    """A habit; with ``include_logs=true`` its streak logs are embedded."""
    if request.args.get('include_logs', 'false').lower() != 'true':
        return jsonify({'success': True, 'data': _habit_or_404(habit_id).to_dict()})

    habit = _logs().get_habit_with_logs(habit_id)
    if habit is None:
        raise ResourceNotFoundError(f"Habit {habit_id} not found")
    data = habit.to_dict()
    data['logs'] = [entry.to_dict() for entry in habit.logs]
    return jsonify({'success': True, 'data': data})

@habits_bp.route('/habits/<int:habit_id>', methods=['PATCH'])
def update_habit(habit_id):
    data = _payload()
    changes = {key: data[key] for key in ('name', 'is_active') if key in data}
    if not changes:
        raise ValidationError("Nothing to update")
    habit = _habits().update(habit_id, **changes)
    return jsonify({'success': True, 'data': habit.to_dict()})

@habits_bp.route('/habits/<int:habit_id>/deactivate', methods=['POST'])
def deactivate_habit(habit_id):
    habit = _habits().deactivate(habit_id)
    return jsonify({'success': True, 'data': habit.to_dict()})

@habits_bp.route('/habits/<int:habit_id>', methods=['DELETE'])
def delete_habit(habit_id):
    """Delete a habit and all of its logs."""
    _habits().delete(habit_id)
    return jsonify({'success': True})

@habits_bp.route('/habits/<int:habit_id>/logs', methods=['GET'])
def list_logs(habit_id):
    _habit_or_404(habit_id)
    logs = _logs().get_by_habit_id(habit_id)
    return jsonify({'success': True, 'data': [entry.to_dict() for entry in logs]})

@habits_bp.route('/habits/<int:habit_id>/logs', methods=['POST'])
def create_log(habit_id):
    data = _payload()
    if 'streak_duration' not in data:
        raise ValidationError("streak_duration is required")
    entry = _logs().insert(
        habit_id,
        data['streak_duration'],
        trigger=data.get('trigger'),
        notes=data.get('notes'),
    )
    return jsonify({'success': True, 'data': entry.to_dict()}), 201

@habits_bp.route('/habits/<int:habit_id>/longest', methods=['GET'])
def longest_streak(habit_id):
    """The log holding the habit's longest streak (null when it has none)."""
    _habit_or_404(habit_id)
    entry = _logs().get_longest_streak_for_habit(habit_id)
    return jsonify({'success': True, 'data': entry.to_dict() if entry else None})

@habits_bp.route('/logs/longest', methods=['GET'])
def longest_streak_achieved():
    return jsonify({'success': True, 'data': {'streak_duration': _logs().get_longest_streak_achieved()}})

@habits_bp.route('/logs/<int:log_id>', methods=['GET'])
def get_log(log_id):
    entry = _logs().get_by_id(log_id)
    if entry is None:
        raise ResourceNotFoundError(f"Habit log {log_id} not found")
    return jsonify({'success': True, 'data': entry.to_dict()})

@habits_bp.route('/logs/<int:log_id>', methods=['PATCH'])
def update_log(log_id):
    data = _payload()
    changes = {key: data[key] for key in ('streak_duration', 'trigger', 'notes') if key in data}
    if not changes:
        raise ValidationError("Nothing to update")
    entry = _logs().update(log_id, **changes)
    return jsonify({'success': True, 'data': entry.to_dict()})
