import pytest

from jscells import coerce_array, coerced_array_type, pack, type_of, unpack
from jscells.types import CHILDREN_TYPES, DESCENDANT_TYPES, ancestor_types, is_subtype


def test_type_lattice():
    assert CHILDREN_TYPES['number'] == ['integer']
    assert CHILDREN_TYPES['table'] == []
    assert DESCENDANT_TYPES['table'] == []
    assert DESCENDANT_TYPES['array[number]'] == ['array[integer]']
    assert set(DESCENDANT_TYPES['array']) == {
        'array[boolean]', 'array[number]', 'array[integer]', 'array[string]', 'array[object]',
    }
    assert len(DESCENDANT_TYPES['any']) == len(CHILDREN_TYPES) - 1


def test_ancestors_and_subtypes():
    assert ancestor_types('array[integer]') == ['array[number]', 'array', 'any']
    assert ancestor_types('any') == []
    assert is_subtype('integer', 'number')
    assert is_subtype('integer', 'any')
    assert is_subtype('string', 'string')
    assert not is_subtype('number', 'integer')


@pytest.mark.parametrize("value, expected", [
    (None, 'null'),
    (True, 'boolean'),
    (3, 'integer'),
    (3.0, 'integer'),
    (3.5, 'number'),
    ('x', 'string'),
    ([1, 2], 'array'),
    ({'a': 1}, 'object'),
    ({'type': 'table', 'data': {}}, 'table'),
    (len, 'function'),
])
def test_type_of(value, expected):
    assert type_of(value) == expected


def test_coerced_array_type():
    assert coerced_array_type([]) == 'array'
    assert coerced_array_type(['integer', 'integer']) == 'array[integer]'
    assert coerced_array_type(['integer', 'number']) == 'array[number]'
    assert coerced_array_type(['number', 'integer', 'integer']) == 'array[number]'
    assert coerced_array_type(['string', 'integer']) == 'array'
    assert coerced_array_type(['boolean', None]) == 'array'
    assert coerced_array_type([pack(1), pack(2.5)]) == 'array[number]'
    assert coerced_array_type([pack('a'), pack('b')]) == 'array[string]'


def test_coerce_array():
    assert coerce_array([pack(1), pack(2)]) == {'type': 'array[integer]', 'data': [1, 2]}
    assert coerce_array([pack(1), pack('x')]) == {'type': 'array', 'data': [1, 'x']}


@pytest.mark.parametrize("value", [None, False, 42, 3.14, 'hello', [1, 'a'], {'b': [1, 2]}])
def test_pack_then_unpack(value):
    assert unpack(pack(value)) == value


def test_pack_shapes():
    assert pack(42) == {'type': 'integer', 'data': 42}
    assert pack(None) == {'type': 'null', 'data': None}
    assert pack({'type': 'image', 'src': 'data:image/png;base64,AAA'}) == {
        'type': 'image', 'src': 'data:image/png;base64,AAA',
    }


def test_pack_function_is_a_reference():
    class Ctx:
        id = 'ctx-1'

    def area(width, height):
        return width * height

    packed = pack(area, context=Ctx())
    assert packed == {'type': 'function', 'data': {'id': None, 'name': 'area', 'context': 'ctx-1'}}


def test_unpack_image_and_missing():
    assert unpack(None) is None
    image = {'type': 'image', 'src': 'x.png'}
    assert unpack(image) == image


def test_coerced_array_type_of_plain_values():
    assert coerced_array_type([1, 2.5]) == 'array[number]'
    assert coerced_array_type([1, 2]) == 'array[integer]'
    assert coerced_array_type([True, False]) == 'array[boolean]'
    assert coerced_array_type([1, {'a': 1}]) == 'array'
