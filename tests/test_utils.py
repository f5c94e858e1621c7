from jscells.builtins import JS_GLOBALS
from jscells.utils import BUILTINS_ENV, load_builtins, load_yaml


def test_defaults(monkeypatch):
    monkeypatch.delenv(BUILTINS_ENV, raising=False)
    assert load_builtins() == JS_GLOBALS
    assert load_yaml(None) == {}


def test_extra_builtins(tmp_path):
    path = tmp_path / 'builtins.yaml'
    path.write_text('builtins:\n  - d3\n  - _\n')
    names = load_builtins(str(path))
    assert {'d3', '_', 'Math', 'console'} <= names


def test_replace_builtins(tmp_path):
    path = tmp_path / 'builtins.yaml'
    path.write_text('replace: true\nbuiltins: d3 Math\n')
    assert load_builtins(str(path)) == frozenset({'d3', 'Math'})


def test_builtins_from_environment(tmp_path, monkeypatch):
    path = tmp_path / 'env.yaml'
    path.write_text('builtins: [plotly]\n')
    monkeypatch.setenv(BUILTINS_ENV, str(path))
    assert 'plotly' in load_builtins()


def test_empty_file(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text('')
    assert load_builtins(str(path)) == JS_GLOBALS
