"""
Example: Folder and file helpers
Description: Create one file, then several files concurrently
"""

import asyncio

from callswarm import create_file, create_multiple_files


async def main() -> None:
    await create_file("my_folder", "my_file.txt", "Hello, world!")

    errors = await create_multiple_files(
        "my_folder",
        [
            ("file1.txt", "Content 1"),
            ("file2.txt", "Content 2"),
            ("file3.log", "Log content"),
        ],
    )
    if errors:
        print(f"Failed: {sorted(errors)}")


if __name__ == "__main__":
    asyncio.run(main())
