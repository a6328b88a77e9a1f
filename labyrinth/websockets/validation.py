"""Lightweight websocket payload validation utilities.

Minimal schema-like checking with clear, consistent error responses, so
handlers can reject bad payloads before they reach ``GenerationConfig``.

Design goals:
- Fast, small, explicit; not a general JSON Schema implementation.
- Return (ok, value_or_error) tuples; caller decides whether to emit an error event.

Schema Mini-Language (Python dict):
{
  'field_name': ('type', required: bool, extras: dict)
}
Supported types: 'str', 'int', 'number', 'bool', 'list', 'dict', 'seed'
('seed' accepts an int or a string).
Extras examples:
  max_len, min_len, allow_empty (str)
  min, max (int / number)
  item_type, length (list)
  choices (str)

Example:
 schema = {
   'mode': ('str', False, {'choices': ('2d', '3d')})
 }
 ok, data_or_err = validate(data, schema)

If invalid: (False, {'field': 'mode', 'error': 'not one of 2d, 3d', 'code': 'choices'})
If valid: (True, normalized_data)
"""
from __future__ import annotations

from typing import Any, Dict, Tuple

PRIMITIVES = {
    'str': str,
    'int': int,
    'number': (int, float),
    'bool': bool,
    'list': list,
    'dict': dict,
    'seed': (int, str),
}

# bool is an int subclass; these types must not accept True/False
_NO_BOOL = ('int', 'number', 'seed')


def _fail(field: str, message: str, code: str) -> Tuple[bool, Dict[str, Any]]:
    return False, {'field': field, 'error': message, 'code': code}


def validate(payload: Any, schema: Dict[str, tuple]) -> Tuple[bool, Dict[str, Any]]:
    if not isinstance(payload, dict):
        return _fail('__root__', 'payload must be an object', 'type')
    out = {}
    for name, spec in schema.items():
        if not isinstance(spec, tuple) or len(spec) < 2:
            return _fail('__schema__', f'invalid spec for {name}', 'schema')
        type_name, required = spec[0], spec[1]
        extras = spec[2] if len(spec) > 2 else {}
        if type_name not in PRIMITIVES:
            return _fail('__schema__', f'unsupported type {type_name}', 'schema')
        if name not in payload or payload[name] is None:
            if required:
                return _fail(name, 'missing required field', 'required')
            if name in payload:
                out[name] = None
            continue
        value = payload[name]
        if not isinstance(value, PRIMITIVES[type_name]) or (type_name in _NO_BOOL and isinstance(value, bool)):
            return _fail(name, f'expected {type_name}', 'type')
        if type_name == 'str':
            s = value.strip() if not extras.get('allow_empty') else value
            if not extras.get('allow_empty') and len(s) == 0:
                return _fail(name, 'must not be empty', 'empty')
            if 'max_len' in extras and len(value) > extras['max_len']:
                return _fail(name, 'too long', 'max_len')
            if 'min_len' in extras and len(value) < extras['min_len']:
                return _fail(name, 'too short', 'min_len')
            if 'choices' in extras and s.lower() not in extras['choices']:
                return _fail(name, 'not one of ' + ', '.join(extras['choices']), 'choices')
            out[name] = s
        elif type_name in ('int', 'number'):
            if 'min' in extras and value < extras['min']:
                return _fail(name, f'must be >= {extras["min"]}', 'min')
            if 'max' in extras and value > extras['max']:
                return _fail(name, f'must be <= {extras["max"]}', 'max')
            out[name] = value
        elif type_name == 'list':
            if 'length' in extras and len(value) != extras['length']:
                return _fail(name, f'expected {extras["length"]} elements', 'length')
            item_type = extras.get('item_type')
            if item_type:
                it = PRIMITIVES.get(item_type)
                if not it:
                    return _fail('__schema__', f'unsupported item_type {item_type}', 'schema')
                for idx, elem in enumerate(value):
                    if not isinstance(elem, it) or (item_type in _NO_BOOL and isinstance(elem, bool)):
                        return _fail(name, f'element {idx} not {item_type}', 'item_type')
            out[name] = value
        else:
            out[name] = value
    return True, out


# Predefined schemas used by handlers
GENERATE_DUNGEON = {
    'grid_size': ('list', False, {'length': 3, 'item_type': 'int'}),
    'room_attempts': ('int', False, {'min': 0, 'max': 10_000}),
    'max_room_size': ('list', False, {'length': 3, 'item_type': 'int'}),
    'seed': ('seed', False),
    'loop_chance': ('number', False, {'min': 0, 'max': 1}),
    'stair_cost': ('number', False, {'min': 0}),
    'mode': ('str', False, {'choices': ('2d', '3d')}),
    'include_cells': ('bool', False),
}
