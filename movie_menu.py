# movie_menu.py
# Interactive numbered menu for the movie database

import argparse
import logging
import os
import sys
from typing import Optional, Tuple, Dict, Any

from movie_catalog import (
    DEFAULT_DB_FILE, DEFAULT_FUZZY_THRESHOLD, CatalogError,
    make_movie, list_movies, add_movie, get_movie, update_movie, delete_movie,
    search_movies, filter_by_genre, sort_by_rating, catalog_stats,
    format_movie, format_ranked, get_last_save_error,
)

logger = logging.getLogger(__name__)

MENU_OPTIONS = [
    "Show all movies",
    "Add new movie",
    "Update movie",
    "Search movie",
    "Filter by genre",
    "Sort by rating",
    "Delete movie",
    "Show statistics",
    "Exit",
]


def _print_movies(movies, formatter=format_movie) -> None:
    for i, m in enumerate(movies, start=1):
        print(f"{i}. {formatter(m)}\n")


def _report_save_failure() -> None:
    err = get_last_save_error() or 'unknown error'
    print(f"Failed to save movies: {err}")


def show_movies(path: str) -> bool:
    """Print the whole catalog. Returns False if it is empty."""
    movies = list_movies(path)
    if not movies:
        print('No movies in database')
        return False
    print('\nMovie List:')
    _print_movies(movies)
    return True


def add_movie_interactive(path: str) -> None:
    title = input('Enter movie title: ').strip()
    year = input('Enter release year: ').strip()
    genre = input('Enter genre: ').strip()
    rating = input('Enter rating (0-10): ').strip()
    if add_movie(make_movie(title, year, genre, rating), path=path):
        print('Movie added successfully!')
    else:
        _report_save_failure()


def _pick_movie(path: str, action: str) -> Optional[Tuple[int, Dict[str, Any]]]:
    # list first: position is the only way to address a record
    if not show_movies(path):
        return None
    num = input(f'Enter movie number to {action}: ').strip()
    try:
        picked = get_movie(int(num), path=path)
    except ValueError:
        picked = None
    if picked is None:
        print('Invalid movie number!')
    return picked


def update_movie_interactive(path: str) -> None:
    picked = _pick_movie(path, 'update')
    if picked is None:
        return
    index, movie = picked
    print('\nCurrent movie details:')
    print(f"Title: {movie.get('title', '')}")
    print(f"Year: {movie.get('year', '')}")
    print(f"Genre: {movie.get('genre', '')}")
    print(f"Rating: {movie.get('rating', '')}")

    print('\nEnter new details (press Enter to keep current value):')
    changes = {
        'title': input('New title: ').strip(),
        'year': input('New year: ').strip(),
        'genre': input('New genre: ').strip(),
        'rating': input('New rating (0-10): ').strip(),
    }
    if update_movie(index, path=path, **changes) is not None:
        print('Movie updated successfully!')
    else:
        _report_save_failure()


def search_interactive(path: str, fuzzy: bool = True, fuzzy_threshold: int = DEFAULT_FUZZY_THRESHOLD) -> None:
    term = input('Enter movie title to search: ')
    results = search_movies(term, path=path)
    if results:
        print('\nSearch Results:')
        _print_movies(results)
        return
    print('No movies found!')
    if fuzzy:
        close = search_movies(term, path=path, fuzzy=True, fuzzy_threshold=fuzzy_threshold)
        if close:
            print('\nDid you mean:')
            _print_movies(close)


def filter_interactive(path: str) -> None:
    genre = input('Enter genre to filter: ').strip()
    filtered = filter_by_genre(genre, path=path)
    if not filtered:
        print('No movies found in that genre!')
        return
    print(f'\nMovies in {genre} genre:')
    _print_movies(filtered)


def sort_interactive(path: str) -> None:
    ranked = sort_by_rating(path=path)
    if not ranked:
        print('No movies in database')
        return
    print('\nMovies sorted by rating (highest to lowest):')
    _print_movies(ranked, formatter=format_ranked)


def delete_movie_interactive(path: str) -> None:
    picked = _pick_movie(path, 'delete')
    if picked is None:
        return
    index, movie = picked
    confirm = input(f"Are you sure you want to delete \"{movie.get('title', '')}\"? [y/N]: ").strip().lower()
    if confirm not in ('y', 'yes'):
        print('Delete cancelled.')
        return
    if delete_movie(index, path=path) is not None:
        print('Movie deleted successfully!')
    else:
        _report_save_failure()


def show_stats(path: str) -> None:
    stats = catalog_stats(path=path)
    avg = stats['average_rating']
    print('\nDatabase Statistics:')
    print(f"Total Movies: {stats['total']}")
    print(f"Average Rating: {avg:.2f}" if avg is not None else "Average Rating: N/A")
    print(f"Available Genres: {', '.join(stats['genres'])}")


def main_menu(path: str = DEFAULT_DB_FILE, fuzzy: bool = True,
              fuzzy_threshold: int = DEFAULT_FUZZY_THRESHOLD) -> None:
    """Run the menu until the user exits. CatalogError propagates to the caller."""
    actions = {
        '1': lambda: show_movies(path),
        '2': lambda: add_movie_interactive(path),
        '3': lambda: update_movie_interactive(path),
        '4': lambda: search_interactive(path, fuzzy=fuzzy, fuzzy_threshold=fuzzy_threshold),
        '5': lambda: filter_interactive(path),
        '6': lambda: sort_interactive(path),
        '7': lambda: delete_movie_interactive(path),
        '8': lambda: show_stats(path),
    }
    while True:
        print('\nWelcome to Movie Database')
        for i, label in enumerate(MENU_OPTIONS, start=1):
            print(f'{i}. {label}')
        try:
            choice = input('Enter your choice: ').strip()
        except (KeyboardInterrupt, EOFError):
            print('\nGoodbye!')
            return
        if choice == '9':
            print('Goodbye!')
            return
        action = actions.get(choice)
        if action is None:
            print('Invalid choice!')
            continue
        action()


def _parse_args(argv=None):
    p = argparse.ArgumentParser(description="Movie Database — manage a movie catalog stored in a JSON file")
    p.add_argument('--file', type=str, default=os.environ.get('MOVIE_DB_FILE', DEFAULT_DB_FILE),
                   help=f'JSON file holding the catalog (default: $MOVIE_DB_FILE or {DEFAULT_DB_FILE})')
    p.add_argument('--no-fuzzy', action='store_true', help="Don't suggest close titles when a search finds nothing")
    p.add_argument('--fuzzy-threshold', type=int, default=DEFAULT_FUZZY_THRESHOLD,
                   help='Fuzzy matching threshold (0-100)')
    p.add_argument('--log-level', type=str.upper, default='WARNING',
                   choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                   help='Logging level (default: WARNING)')
    return p.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))
    logger.debug("Using catalog file %s", args.file)

    try:
        main_menu(args.file, fuzzy=not args.no_fuzzy, fuzzy_threshold=args.fuzzy_threshold)
    except CatalogError as e:
        logger.error("Aborting: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (KeyboardInterrupt, EOFError):
        print('\nGoodbye!')


if __name__ == '__main__':
    main()
