import re
from .cli_logger import logger
from .errors import FetchError
from .utils import run_shell_command, download_and_extract
from .utils.file_manager import ARCHIVE_EXTENSIONS

GIT_URL_PATTERN = re.compile(r"^(https?://|ssh://|git://|git@)")
# foo-1.2.tar.gz, foo-v2.0.1-rc1.zip
VERSION_SUFFIX_PATTERN = re.compile(r"-v?\d+(\.\d+)*([-.~+][0-9A-Za-z]+)*$")


def is_archive_url(source):
    return bool(GIT_URL_PATTERN.match(source)) and source.lower().endswith(ARCHIVE_EXTENSIONS)


def is_url(source):
    return bool(GIT_URL_PATTERN.match(source))


def package_name_from_source(source):
    """
    Derives the package (and expected executable) name from a request.

    A plain name is returned unchanged. For URLs the last path component is
    used with any .git or archive extension stripped. Archive names also
    lose a trailing version, so foo-1.0.tar.gz gives foo.
    """
    if not is_url(source):
        return source

    name = source.rstrip("/").split("/")[-1].split(":")[-1]
    lowered = name.lower()
    for ext in ARCHIVE_EXTENSIONS + (".git",):
        if lowered.endswith(ext):
            name = name[:-len(ext)]
            break
    if is_archive_url(source):
        name = VERSION_SUFFIX_PATTERN.sub("", name) or name
    return name


def clone_url_for(source, git_host):
    if is_url(source):
        return source
    return f"https://{git_host}/{source}.git"


def clone_repository(url, dest, depth=1):
    logger.info(f"~> Cloning repository: {url}")
    command = ["git", "clone"]
    if depth and depth > 0:
        command.append(f"--depth={depth}")
    command.extend([url, dest])
    _, _, returncode = run_shell_command(command)
    if returncode != 0:
        raise FetchError(f"Failed to clone repository {url}")
    return dest


def fetch_source(source, dest, settings):
    """
    Fetches the source of a package into dest.

    ``source`` is a package name (cloned from the configured git host), a
    git URL, or an archive URL which is downloaded and unpacked.

    Raises:
        FetchError: the clone or download failed.
    """
    if is_archive_url(source):
        logger.info(f"~> Downloading source archive: {source}")
        if download_and_extract(source, dest) is None:
            raise FetchError(f"Failed to download source archive {source}")
        return dest

    url = clone_url_for(source, settings["git_host"])
    return clone_repository(url, dest, depth=settings["clone_depth"])
