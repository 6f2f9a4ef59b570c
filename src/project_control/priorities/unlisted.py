from collections.abc import Iterable


def find_unlisted(tagged_projects: Iterable[str], listed_projects: Iterable[str]) -> list[str]:
    listed = set(listed_projects)
    unlisted: list[str] = []
    for name in tagged_projects:
        if name not in listed and name not in unlisted:
            unlisted.append(name)
    return unlisted
