from __future__ import annotations

import asyncio
import os
from pathlib import Path

from loguru import logger

"""
Folder and file helpers used to materialize output locations.

Blocking filesystem calls run in the default executor so the helpers can be
awaited from inside a running swarm without stalling the event loop.
"""


async def create_folder(folder_name: str | os.PathLike[str]) -> None:
    """
    Create a folder (and its parents) if it does not already exist.

    Args:
        folder_name (str | os.PathLike[str]): Folder to create

    Raises:
        OSError: If the folder cannot be created
    """
    path = Path(folder_name)
    if path.is_dir():
        logger.debug(f"Folder '{path}' already exists.")
        return
    await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
    logger.info(f"Folder '{path}' created.")


def _write_text(path: Path, content: str) -> None:
    with open(path, mode="w", encoding="utf-8") as f:
        f.write(content)


async def create_file(
    folder_name: str | os.PathLike[str],
    file_name: str,
    content: str,
) -> Path:
    """
    Write a file inside a folder, creating the folder first if needed.

    An existing file with the same name is overwritten.

    Args:
        folder_name (str | os.PathLike[str]): Folder that will hold the file
        file_name (str): File name including its extension
        content (str): Text to write

    Returns:
        Path: Path of the written file

    Raises:
        OSError: If the folder or the file cannot be written

    Example:
        >>> await create_file("my_folder", "my_file.txt", "Hello, world!")
        PosixPath('my_folder/my_file.txt')
    """
    await create_folder(folder_name)
    file_path = Path(folder_name) / file_name
    await asyncio.to_thread(_write_text, file_path, content)
    logger.info(f"File '{file_path}' created with content.")
    return file_path


async def create_multiple_files(
    folder_name: str | os.PathLike[str],
    files: list[tuple[str, str]],
) -> dict[str, OSError]:
    """
    Write several files into one folder concurrently.

    A failure to write one file is logged and reported but does not stop
    the others.

    Args:
        folder_name (str | os.PathLike[str]): Folder that will hold the files
        files (list[tuple[str, str]]): Pairs of (file_name, content)

    Returns:
        dict[str, OSError]: Errors keyed by file name; empty when all succeeded

    Example:
        >>> await create_multiple_files(
        ...     "my_folder", [("file1.txt", "Content 1"), ("file2.txt", "Content 2")]
        ... )
        {}
    """
    names = [name for name, _ in files]
    results = await asyncio.gather(
        *(create_file(folder_name, name, content) for name, content in files),
        return_exceptions=True,
    )

    errors: dict[str, OSError] = {}
    for name, result in zip(names, results):
        if isinstance(result, OSError):
            logger.error(f"Failed to create file '{Path(folder_name) / name}': {result}")
            errors[name] = result
        elif isinstance(result, BaseException):
            raise result
    return errors
