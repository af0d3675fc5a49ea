"""
Shared pytest fixtures for the bracket tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.manager import TournamentManager


@pytest.fixture
def four_teams():
    return ["A", "B", "C", "D"]


@pytest.fixture
def three_teams():
    return ["A", "B", "C"]


@pytest.fixture
def saved():
    """Collects every TournamentData handed to the save callback."""
    return []


@pytest.fixture
def manager(saved):
    """Manager with an empty registry whose saves are recorded."""
    return TournamentManager(save_callback=saved.append)


@pytest.fixture
def four_team_manager(manager, four_teams):
    """Manager with an active tournament holding four teams and a built bracket."""
    manager.create_tournament("Spring Cup")
    for team in four_teams:
        manager.add_team(team)
    manager.build_bracket()
    return manager


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the web app at a temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'TOURNAMENTS_FILE', str(data_dir / "tournaments.yaml"))
    return data_dir


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
