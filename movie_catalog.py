# movie_catalog.py
# Catalog store for the movie database (importable, testable)

from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple
import logging
import re
import json

from rapidfuzz import fuzz, process as rprocess

DEFAULT_DB_FILE = 'movie.json'
DEFAULT_FUZZY_THRESHOLD = 70
MOVIE_FIELDS = ('title', 'year', 'genre', 'rating')

logger = logging.getLogger(__name__)

# Tracks the last save error message (if any) to help debugging failed saves
last_save_error: Optional[str] = None


class CatalogError(Exception):
    """Raised when the backing document is missing or malformed."""


def get_last_save_error() -> Optional[str]:
    """Return the last error message recorded when saving movies (or None)."""
    return last_save_error


def make_movie(title: str, year: Any, genre: str, rating: Any) -> Dict[str, Any]:
    return {'title': title, 'year': year, 'genre': genre, 'rating': rating}


# ---------- Persistence ----------
def load_movies(path: str = DEFAULT_DB_FILE) -> List[Dict[str, Any]]:
    """
    Load the whole catalog from the backing document.

    Args:
        path: Path to the JSON document.

    Returns:
        The ordered list of movie dicts.

    Raises:
        CatalogError: the file is missing, is not valid JSON, or does not
            hold an array of movie objects.
    """
    p = Path(path)
    if not p.exists():
        raise CatalogError(f"Movie file {path} not found")
    try:
        with p.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.exception("Failed to load movies from %s", path)
        raise CatalogError(f"Could not read {path}: {e}") from e

    # older files wrap the list as {"movies": [...]}
    if isinstance(data, dict) and isinstance(data.get('movies'), list):
        logger.warning("%s uses the legacy {'movies': [...]} layout", path)
        data = data['movies']
    if not isinstance(data, list):
        raise CatalogError(f"Unexpected format in {path}: expected a list, got {type(data).__name__}")
    for entry in data:
        if not isinstance(entry, dict):
            raise CatalogError(f"Unexpected entry in {path}: {entry!r}")
    return data


def save_movies(path: str, movie_list: List[Dict[str, Any]]) -> bool:
    """Overwrite the backing document with the full list. Returns True on success."""
    global last_save_error
    try:
        p = Path(path)
        with p.open('w', encoding='utf-8') as f:
            json.dump(movie_list, f, indent=2)
        logger.info("Saved %d movies to %s", len(movie_list), path)
        last_save_error = None
        return True
    except OSError as e:
        last_save_error = str(e)
        logger.exception("Failed to save movies to %s: %s", path, e)
        return False


# ---------- Formatting ----------
def format_movie(m: dict) -> str:
    return (f"{m.get('title', '')} ({m.get('year', '')})\n"
            f"   Genre: {m.get('genre', '')}\n"
            f"   Rating: {m.get('rating', '')}/10")


def format_ranked(m: dict) -> str:
    # rating-first layout used by the sorted view
    return (f"{m.get('title', '')}\n"
            f"   Rating: {m.get('rating', '')}/10\n"
            f"   Genre: {m.get('genre', '')}")


# ---------- Helpers ----------
def sanitize_query(q: str, max_length: int = 100) -> str:
    """Clean user input to a safe, normalized string for searching."""
    if not isinstance(q, str):
        raise TypeError("query must be a string")
    q = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', q).strip()
    if len(q) > max_length:
        q = q[:max_length]
    return q


def split_genres(genre_text: Any) -> List[str]:
    """Split a comma-separated genre field into lowercased names."""
    if not genre_text:
        return []
    return [g.strip().lower() for g in str(genre_text).split(',') if g.strip()]


def rating_value(movie: dict) -> Optional[float]:
    """Coerce a movie's rating to a float, or None if it is not numeric.

    A blank rating counts as 0.
    """
    raw = movie.get('rating')
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, str) and not raw.strip():
        return 0.0
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    if value != value:  # NaN
        return None
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ---------- Queries and mutations ----------
def list_movies(path: str = DEFAULT_DB_FILE) -> List[Dict[str, Any]]:
    return load_movies(path)


def add_movie(movie: dict, path: str = DEFAULT_DB_FILE) -> bool:
    """Append a movie at the end of the catalog and save. Returns True if saved."""
    movies = load_movies(path)
    movies.append(movie)
    return save_movies(path, movies)


def get_movie(display_index: int, path: str = DEFAULT_DB_FILE) -> Optional[Tuple[int, Dict[str, Any]]]:
    """
    Resolve a user-facing position to a catalog entry.

    Args:
        display_index: 1-based position as shown in the movie list.
        path: Path to the JSON document.

    Returns:
        (index, movie) with a 0-based index, or None if out of range.
    """
    movies = load_movies(path)
    idx = display_index - 1
    if 0 <= idx < len(movies):
        return idx, movies[idx]
    return None


def update_movie(index: int, path: str = DEFAULT_DB_FILE, **changes: Any) -> Optional[Dict[str, Any]]:
    """
    Change the named fields of the movie at ``index`` and save.

    Blank values (None or whitespace-only strings) keep the current value.

    Returns:
        The updated movie dict, or None if the index is out of range or
        the save failed.
    """
    movies = load_movies(path)
    if index < 0 or index >= len(movies):
        logger.warning("Update skipped: index %d out of range (catalog has %d movies)", index, len(movies))
        return None
    movie = movies[index]
    for key in MOVIE_FIELDS:
        if key in changes and not _is_blank(changes[key]):
            movie[key] = changes[key]
    unknown = set(changes) - set(MOVIE_FIELDS)
    if unknown:
        logger.warning("Ignoring unknown movie fields: %s", ', '.join(sorted(unknown)))
    if not save_movies(path, movies):
        return None
    return movie


def delete_movie(index: int, path: str = DEFAULT_DB_FILE) -> Optional[Dict[str, Any]]:
    """Remove exactly one movie and save. Returns the removed movie, or None."""
    movies = load_movies(path)
    if index < 0 or index >= len(movies):
        logger.warning("Delete skipped: index %d out of range (catalog has %d movies)", index, len(movies))
        return None
    removed = movies.pop(index)
    if not save_movies(path, movies):
        return None
    return removed


def search_movies(term: str, path: str = DEFAULT_DB_FILE, fuzzy: bool = False,
                  fuzzy_threshold: int = DEFAULT_FUZZY_THRESHOLD) -> List[Dict[str, Any]]:
    """Find movies whose title contains ``term`` (case-insensitive).

    With ``fuzzy`` enabled, close titles that are not substring hits are
    appended, best RapidFuzz score first.
    """
    q = sanitize_query(term).lower()
    movies = load_movies(path)
    # a blank term matches every title
    hits = [m for m in movies if q in str(m.get('title', '')).lower()]
    if not fuzzy or not q:
        return hits

    hit_ids = {id(m) for m in hits}
    candidates = [m for m in movies if id(m) not in hit_ids]
    choices = [str(m.get('title', '')).lower() for m in candidates]
    results = rprocess.extract(q, choices, scorer=fuzz.partial_ratio,
                               score_cutoff=fuzzy_threshold, limit=None)
    # extract returns best-first; keep catalog order for equal scores
    results = sorted(results, key=lambda r: (-r[1], r[2]))
    return hits + [candidates[idx] for _, _, idx in results]


def filter_by_genre(genre: str, path: str = DEFAULT_DB_FILE) -> List[Dict[str, Any]]:
    wanted = str(genre).strip().lower()
    if not wanted:
        return []
    return [m for m in load_movies(path) if wanted in split_genres(m.get('genre'))]


def sort_by_rating(path: str = DEFAULT_DB_FILE) -> List[Dict[str, Any]]:
    """Return a copy of the catalog ordered by rating, highest first.

    Non-numeric ratings go last; ties keep catalog order.
    """
    def _key(m):
        value = rating_value(m)
        return (value is None, -(value or 0.0))

    return sorted(load_movies(path), key=_key)


def catalog_stats(path: str = DEFAULT_DB_FILE) -> Dict[str, Any]:
    """Return total count, average rating and the distinct genre values."""
    movies = load_movies(path)
    ratings = []
    for m in movies:
        value = rating_value(m)
        if value is None:
            logger.warning("Skipping non-numeric rating %r for %r", m.get('rating'), m.get('title'))
            continue
        ratings.append(value)

    genres: List[str] = []
    for m in movies:
        g = m.get('genre')
        if g and g not in genres:
            genres.append(g)

    return {
        'total': len(movies),
        'average_rating': sum(ratings) / len(ratings) if ratings else None,
        'genres': genres,
    }
