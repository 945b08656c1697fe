import json
import pytest


SAMPLE_MOVIES = [
    {'title': 'Inception', 'year': '2010', 'genre': 'Action, Sci-Fi', 'rating': '8.8'},
    {'title': 'The Hangover', 'year': '2009', 'genre': 'Comedy', 'rating': '7.7'},
    {'title': 'Superbad', 'year': 2007, 'genre': 'comedy, Teen', 'rating': '7.6'},
    {'title': 'The Dark Knight', 'year': '2008', 'genre': 'Action, Crime, Drama', 'rating': '9.0'},
    {'title': 'Tragicomedy Tales', 'year': '2015', 'genre': 'Tragicomedy', 'rating': '6.0'},
]


@pytest.fixture
def catalog_file(tmp_path):
    """A backing document pre-filled with the sample movies."""
    p = tmp_path / 'movie.json'
    p.write_text(json.dumps(SAMPLE_MOVIES, indent=2), encoding='utf-8')
    return str(p)


@pytest.fixture
def empty_catalog(tmp_path):
    p = tmp_path / 'empty.json'
    p.write_text('[]', encoding='utf-8')
    return str(p)


@pytest.fixture
def feed_input(monkeypatch):
    """Script the answers returned by input(); running out behaves like EOF."""
    def _feed(*answers):
        it = iter(answers)

        def fake_input(prompt=''):
            try:
                return next(it)
            except StopIteration:
                raise EOFError
        monkeypatch.setattr('builtins.input', fake_input)
    return _feed
