"""Test that the project structure is correct."""


def test_directories_exist(project_root):
    """Test that all expected directories exist."""
    assert (project_root / "core").exists()
    assert (project_root / "models").exists()
    assert (project_root / "commands").exists()
    assert (project_root / "tests").exists()


def test_init_files_exist(project_root):
    """Test that all package __init__.py files exist."""
    assert (project_root / "core" / "__init__.py").exists()
    assert (project_root / "models" / "__init__.py").exists()
    assert (project_root / "commands" / "__init__.py").exists()


def test_main_script_exists(project_root):
    """Test that main entry point exists."""
    assert (project_root / "wled_control.py").exists()


def test_commands_registered():
    """Every command module's commands are reachable from the CLI group."""
    from wled_control import cli

    expected = {
        'help', 'setup', 'configure', 'status', 'effects', 'palettes', 'presets',
        'playlists', 'info', 'monitor', 'power', 'brightness', 'colour', 'effect',
        'palette', 'reverse', 'alarm', 'nightlight', 'refresh', 'preset',
        'save-preset', 'save-current', 'delete-preset', 'playlist',
    }
    assert expected <= set(cli.commands)
