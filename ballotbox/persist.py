'''Snapshots of election state in a JSON-ready dictionary form.

The engine itself keeps everything in memory; durable storage is the job of
whoever hosts it. This module turns the engine and its records into plain
dictionaries, lists and scalars that any JSON store can keep, and restores
them again::

    snapshot = ballotbox.persist.to_dict(engine)
    json.dump(snapshot, outfile)
    ...
    engine = ballotbox.persist.from_dict(json.load(infile))

Objects are tagged with their scoped class name; only classes from the
:mod:`ballotbox` package can be instantiated on restore.
'''

import sys
import enum
import inspect
import builtins
import importlib
from typing import Any, List, Dict, Callable


PACKAGE_NAME: str = 'ballotbox'

ATOMIC_TYPES: List[type] = [str, int, float, bool, type(None)]

SEQUENCE_TYPES: List[type] = [frozenset, tuple]


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method serializes the object attributes named like the
    class's constructor parameters, or those listed in its
    ``serialize_params`` attribute if it has one. Thus it only suits classes
    that keep their constructor arguments as attributes of the same name.

    :param class_: The class to add the method to.
    '''
    if hasattr(class_, 'serialize_params'):
        param_names = list(class_.serialize_params)
    else:
        param_names = [
            name for name in inspect.signature(class_.__init__).parameters
            if name != 'self'
        ]

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': scoped_class_name(self)}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    return class_


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize an engine or one of its records to a JSON-ready dictionary.

    :param obj: An object providing a `to_dict()` method, such as
        :class:`ballotbox.engine.ElectionEngine`,
        :class:`ballotbox.candidate.Candidate` or
        :class:`ballotbox.voter.Voter`.
    """
    if not hasattr(obj, 'to_dict'):
        raise ValueError(f'{obj!r} does not support serialization')
    return obj.to_dict()


def from_dict(value: Dict[str, Any]) -> Any:
    """Restore an object serialized by :func:`to_dict`.

    :param value: A dictionary created by :func:`to_dict`, possibly after
        a trip through JSON.
    :raises ValueError: If the dictionary does not describe a ballotbox
        object.
    """
    if not isinstance(value, dict):
        raise ValueError(f'invalid snapshot: dict expected, got {value!r}')
    elif 'class' not in value:
        raise ValueError('invalid snapshot: must have a class key')
    elif not is_package_identifier(value['class']):
        raise ValueError(f"invalid snapshot class: {value['class']}")
    return deserialize_value(value)


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, enum.Enum):
        return {'type': scoped_class_name(value), 'value': value.value}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif type(value) in CONVERTIBLE_TYPES:
        return CONVERTIBLE_TYPES[type(value)](value)
    elif hasattr(value, 'items') and hasattr(value, 'keys'):
        if all(isinstance(key, str) for key in value.keys()):
            return {key: serialize_value(val) for key, val in value.items()}
        # non-string keys do not survive JSON, keep them in a list
        return {
            'type': 'dict',
            'keys': [serialize_value(key) for key in value.keys()],
            'values': [serialize_value(val) for val in value.values()],
        }
    elif hasattr(value, '__iter__'):
        return [serialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot serialize {value!r} to dict format')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if 'type' in value and is_scoped_identifier(value['type']):
            return deserialize_typed(value)
        elif 'class' in value and is_package_identifier(value['class']):
            return deserialize_class(value)
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif isinstance(value, list):
        return [deserialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot deserialize {value!r}, type unknown')


def deserialize_typed(typedef: Dict[str, Any]) -> Any:
    typeobj = get_object(typedef['type'])
    if typeobj is dict:
        return dict(zip(
            [deserialize_value(key) for key in typedef['keys']],
            [deserialize_value(val) for val in typedef['values']],
        ))
    elif 'value' in typedef:
        return typeobj(deserialize_value(typedef['value']))
    else:
        raise ValueError(f'invalid typed value contents: {typedef!r}')


def deserialize_class(clsdef: Dict[str, Any]) -> Any:
    cls = get_object(clsdef['class'])
    params = clsdef.copy()
    del params['class']
    if hasattr(cls, 'from_dict'):
        return cls.from_dict(params)
    return cls(**{
        key: deserialize_value(val) for key, val in params.items()
    })


def get_object(identifier: str) -> Any:
    if '.' not in identifier:
        if identifier not in BUILTIN_TYPES:
            raise ValueError(f'unsupported builtin type: {identifier}')
        return getattr(builtins, identifier)
    elif not is_package_identifier(identifier):
        raise ValueError(f'refusing to load {identifier} from outside '
                         f'the {PACKAGE_NAME} package')
    module, name = identifier.rsplit('.', 1)
    if module not in sys.modules:
        importlib.import_module(module)
    return getattr(sys.modules[module], name)


def is_scoped_identifier(value: Any) -> bool:
    return (
        isinstance(value, str)
        and not value.startswith('.')
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def is_package_identifier(value: Any) -> bool:
    return (
        is_scoped_identifier(value)
        and value.split('.', 1)[0] == PACKAGE_NAME
    )


def scoped_class_name(value: Any) -> str:
    cls = value.__class__
    return '.'.join((cls.__module__, cls.__name__))


def sequence_to_json_factory(typeobj: type) -> Callable[[Any], Dict[str, Any]]:
    typename = typeobj.__name__

    def sequence_to_json(seq) -> Dict[str, Any]:
        return {'type': typename, 'value': [serialize_value(v) for v in seq]}

    return sequence_to_json


CONVERTIBLE_TYPES: Dict[type, Callable] = {
    seqtype: sequence_to_json_factory(seqtype) for seqtype in SEQUENCE_TYPES
}

BUILTIN_TYPES: List[str] = ['dict'] + [t.__name__ for t in SEQUENCE_TYPES]
