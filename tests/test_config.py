"""
Tests for Config.
"""
import pytest

from filemagic.config import Config, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('MAGIC_LIBRARY_NAME', 'MAGIC_DATABASE_PATHS', 'MAGIC_POOL_SIZE', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def test_defaults(tmp_path):
    config = Config(str(tmp_path / "absent.env"))
    assert config.library_name == 'magic'
    assert config.database_paths == []
    assert config.pool_size == 2
    assert config.log_level == 'INFO'


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv('MAGIC_LIBRARY_NAME', '/opt/lib/libmagic.so.1')
    monkeypatch.setenv('MAGIC_DATABASE_PATHS', '/a.mgc::/b.mgc: ')
    monkeypatch.setenv('MAGIC_POOL_SIZE', '8')

    config = Config(str(tmp_path / "absent.env"))
    assert config.library_name == '/opt/lib/libmagic.so.1'
    assert config.database_paths == ['/a.mgc', '/b.mgc']
    assert config.pool_size == 8


def test_blank_library_name_falls_back(monkeypatch, tmp_path):
    monkeypatch.setenv('MAGIC_LIBRARY_NAME', '   ')
    assert Config(str(tmp_path / "absent.env")).library_name == 'magic'


def test_env_file_is_read(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("MAGIC_POOL_SIZE=5\n")
    # python-dotenv sets the variable in os.environ; let monkeypatch undo it
    monkeypatch.setenv('MAGIC_POOL_SIZE', '')
    monkeypatch.delenv('MAGIC_POOL_SIZE')

    assert Config(str(env_file)).pool_size == 5


def test_get_config_is_singleton():
    assert get_config() is get_config()
    first = get_config()
    reset_config()
    assert get_config() is not first
