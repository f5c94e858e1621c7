import pytest

from jscells import Call, CallError, Method, Param, ParamKind, bind_args, pack


def method(*params):
    return Method('f()', list(params))


def call(*args, **named):
    return Call({'name': 'f'}, [pack(a) for a in args], {k: pack(v) for k, v in named.items()} or None)


def test_positional():
    assert bind_args(method(Param('a'), Param('b')), call(1, 'x')) == ([1, 'x'], None)


def test_named_args_fill_params():
    m = method(Param('par1'), Param('par2'), Param('par3'))
    assert bind_args(m, call(par1=1, par2='a', par3=3)) == ([1, 'a', 3], None)


def test_named_then_positional():
    # positional arguments are consumed only by params not given by name
    m = method(Param('a'), Param('b'))
    assert bind_args(m, call(2, a=1)) == ([1, 2], None)


def test_defaults():
    m = method(Param('par1'), Param('par2', default='beep'))
    assert bind_args(m, call('boop')) == (['boop', 'beep'], None)
    assert bind_args(m, call('boop', par2='bop')) == (['boop', 'bop'], None)


def test_null_default():
    m = method(Param('a', default=None))
    assert bind_args(m, call()) == ([None], None)


def test_repeats():
    m = method(Param('arg1'), Param('args', kind=ParamKind.REPEATS))
    assert bind_args(m, call('bar', 'baz', 'boop')) == (['bar', ['baz', 'boop']], None)
    assert bind_args(m, call('bar')) == (['bar', []], None)


def test_extends():
    m = method(Param('arg1'), Param('rest', kind=ParamKind.EXTENDS))
    assert bind_args(m, call(1, a=1, b=2, c=3)) == ([1], {'a': 1, 'b': 2, 'c': 3})
    assert bind_args(m, call(1)) == ([1], None)


def test_extends_skips_named_params():
    m = method(Param('arg1'), Param('rest', kind=ParamKind.EXTENDS))
    assert bind_args(m, call(arg1='x', b=2)) == (['x'], {'b': 2})


def test_missing_param():
    with pytest.raises(CallError, match="Function 'one_param' requires parameter 'par'"):
        bind_args(method(Param('par')), call(), func_name='one_param')


def test_extra_positional():
    with pytest.raises(CallError, match='Function was supplied 1 extra arguments'):
        bind_args(method(), call(42))
    with pytest.raises(CallError, match='extra arguments'):
        bind_args(method(Param('par')), call(1, 2, 3))


def test_extra_named():
    m = method(Param('par'))
    with pytest.raises(CallError, match='Function was supplied extra named arguments "extra1", "extra2"'):
        bind_args(m, call(par=1, extra1=2, extra2=3))


def test_positional_and_named_for_same_param():
    with pytest.raises(CallError, match='extra arguments'):
        bind_args(method(Param('par')), call(1, par=2))


def test_custom_unpack():
    m = method(Param('a'))
    assert bind_args(m, call(5), unpack=lambda pkg: pkg['data'] * 2) == ([10], None)
