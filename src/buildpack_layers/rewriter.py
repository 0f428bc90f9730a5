"""Archive entry rewriting.

Blob entries are re-rooted under a module's version directory. Names are
cleaned as if rooted at that directory, so '..' segments and absolute
names are clamped inside it rather than escaping.
"""

import copy
import posixpath
import tarfile

# PAX records that take priority over the header fields we overwrite
OVERRIDDEN_PAX_KEYS = frozenset({"path", "uid", "gid"})


def clean_entry_name(name: str) -> str:
    """Lexically clean an entry name relative to the archive root.

    Args:
        name: Entry name as stored in the source archive

    Returns:
        Cleaned relative name, or "" if the entry is the archive root

    Examples:
        >>> clean_entry_name("./a//b/../c.txt")
        "a/c.txt"
        >>> clean_entry_name("../../etc/passwd")
        "etc/passwd"
        >>> clean_entry_name("./")
        ""
    """
    # Rooting the name makes normpath drop '..' segments above the root
    rooted = posixpath.normpath("/" + name.lstrip("/"))
    return rooted.lstrip("/")


def rewrite_entry(
    member: tarfile.TarInfo,
    base_dir: str,
    uid: int,
    gid: int,
) -> tarfile.TarInfo | None:
    """Produce the header for a blob entry re-rooted under base_dir.

    The input member is left untouched. Type, mode, size, mtime, link
    target and owner names pass through; uid and gid are overridden.

    Args:
        member: Header read from the module blob
        base_dir: Directory the entry is placed under (e.g.,
            "/cnb/buildpacks/heroku_nodejs/1.2.3")
        uid: Owner user ID for the rewritten entry
        gid: Owner group ID for the rewritten entry

    Returns:
        Rewritten header, or None if the entry is the archive root and
        must be skipped
    """
    relative = clean_entry_name(member.name)
    if not relative:
        return None

    header = copy.copy(member)
    header.name = posixpath.normpath(posixpath.join(base_dir, relative))
    header.uid = uid
    header.gid = gid
    header.pax_headers = {
        key: value
        for key, value in member.pax_headers.items()
        if key not in OVERRIDDEN_PAX_KEYS
    }
    return header
