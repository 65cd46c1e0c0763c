import os
import requests
import zipfile
import tarfile
import shutil
import sys
import contextlib
from ..cli_logger import logger
from ..errors import WorkspaceError

ARCHIVE_EXTENSIONS = (".tar.gz", ".tar.bz2", ".tar.xz", ".tgz", ".zip")

# -------------------- Workspace --------------------

def builds_root(workspace_dir):
    return os.path.join(workspace_dir, "builds")

def build_dir_for(workspace_dir, package_name):
    """Return the per-package checkout directory inside the workspace."""
    try:
        build_dir = _safe_join(builds_root(workspace_dir), package_name)
    except IOError as e:
        raise WorkspaceError(f"Invalid package name '{package_name}': {e}") from e
    if build_dir == os.path.abspath(builds_root(workspace_dir)):
        raise WorkspaceError(f"Invalid package name '{package_name}'")
    return build_dir

def prepare_workspace(workspace_dir):
    """Make sure the workspace root and its builds directory exist."""
    builds = builds_root(workspace_dir)
    try:
        os.makedirs(builds, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"Could not create workspace directory {builds}: {e}") from e
    return builds

def purge_build_dir(build_dir):
    """Remove a stale checkout so nothing from a previous attempt survives."""
    if not os.path.lexists(build_dir):
        return False
    logger.info(f"  - Removing previous build directory {build_dir}")
    try:
        if os.path.isdir(build_dir) and not os.path.islink(build_dir):
            shutil.rmtree(build_dir)
        else:
            os.remove(build_dir)
    except OSError as e:
        raise WorkspaceError(f"Failed to clean previous build at {build_dir}: {e}") from e
    return True

# -------------------- Helpers: safe paths & extraction --------------------

def _safe_join(base, *paths):
    """Safely join paths, preventing path traversal attacks."""
    base = os.path.abspath(base)
    final = os.path.abspath(os.path.join(base, *paths))
    if not final.startswith(base + os.sep) and final != base:
        raise IOError(f"Unsafe path detected: {final}")
    return final

def _safe_extract_zip(zip_ref: zipfile.ZipFile, dest_dir: str, log_each=False):
    """Safely extract a zip file, preventing zip slip attacks."""
    for member in zip_ref.infolist():
        target_path = _safe_join(dest_dir, member.filename)
        if member.is_dir():
            if log_each:
                logger.step_info(f"creating: {member.filename}", indent=3)
            os.makedirs(target_path, exist_ok=True)
        else:
            os.makedirs(os.path.dirname(target_path), exist_ok=True)
            if log_each:
                logger.step_info(f"extracting: {member.filename}", indent=2)
            with zip_ref.open(member, 'r') as src, open(target_path, 'wb') as out:
                shutil.copyfileobj(src, out)
            # Preserve file permissions
            mode = member.external_attr >> 16
            if mode:
                os.chmod(target_path, mode)

def _safe_extract_tar(tar_ref: tarfile.TarFile, dest_dir: str, log_each=False):
    """Safely extract a tar file, preventing path traversal attacks."""
    for member in tar_ref.getmembers():
        member_path = _safe_join(dest_dir, member.name)
        if member.isdir():
            if log_each:
                logger.step_info(f"creating: {member.name}", indent=3)
            os.makedirs(member_path, exist_ok=True)
            continue
        os.makedirs(os.path.dirname(member_path), exist_ok=True)
        if log_each:
            logger.step_info(f"extracting: {member.name}", indent=2)
        src = tar_ref.extractfile(member)
        if src is None:
            # links and device nodes
            continue
        with src as src_file:
            with open(member_path, "wb") as out:
                shutil.copyfileobj(src_file, out)
            if member.mode:
                os.chmod(member_path, member.mode)

def _flatten_single_root(dest_dir):
    """Hoist the contents of a lone top-level directory (foo-1.0/) into dest_dir."""
    entries = os.listdir(dest_dir)
    if len(entries) != 1:
        return
    root = os.path.join(dest_dir, entries[0])
    if not os.path.isdir(root) or os.path.islink(root):
        return
    for item in os.listdir(root):
        shutil.move(os.path.join(root, item), os.path.join(dest_dir, item))
    os.rmdir(root)


def extract(filepath, dest_dir):
    """Extracts an archive file to a destination directory."""
    os.makedirs(dest_dir, exist_ok=True)
    filename = os.path.basename(filepath)

    try:
        if tarfile.is_tarfile(filepath):
            with tarfile.open(filepath, 'r:*') as tar:
                _safe_extract_tar(tar, dest_dir)
        elif zipfile.is_zipfile(filepath):
            with zipfile.ZipFile(filepath, 'r') as zip_ref:
                _safe_extract_zip(zip_ref, dest_dir)
        else:
            logger.warning(f"Unsupported archive type for {filename}. Skipping extraction.")
            return None

        with contextlib.suppress(OSError):
            os.remove(filepath)

        _flatten_single_root(dest_dir)
        logger.success(f"Successfully extracted to {dest_dir}")
        return dest_dir

    except (zipfile.BadZipFile, tarfile.TarError, IOError) as e:
        logger.error(f"Error during extraction: {e}")
        return None

# -------------------- Download & Extract --------------------

def download_and_extract(url, dest_dir, filename=None, timeout=60):
    """Download and extract a file to a destination directory."""
    os.makedirs(dest_dir, exist_ok=True)
    if filename is None:
        filename = url.split('/')[-1]
    filepath = os.path.join(dest_dir, filename)

    temp_filepath = filepath + ".tmp"

    try:
        with requests.get(url, stream=True, timeout=timeout) as r:
            r.raise_for_status()
            total_size = int(r.headers.get('content-length', 0))

            with open(temp_filepath, 'wb') as f:
                chunks = logger.progress(
                    r.iter_content(chunk_size=1024 * 256),  # 256KB chunks
                    description=f"Downloading {filename}",
                    total=total_size,
                )
                for chunk in chunks:
                    if chunk:  # keep-alive chunks may be empty
                        f.write(chunk)

        # Atomic rename
        os.replace(temp_filepath, filepath)

        logger.step_info(f"Archive:  {filename}")

        return extract(filepath, dest_dir)

    except requests.exceptions.RequestException as e:
        logger.error(f"Error downloading the file: {e}")
        with contextlib.suppress(OSError):
            if os.path.exists(temp_filepath):
                os.remove(temp_filepath)
        return None
    except OSError as e:
        logger.error(f"Error writing {filepath}: {e}")
        logger.exception(*sys.exc_info())
        return None
