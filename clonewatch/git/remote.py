import re
from urllib.parse import urlparse


def parse_repo_url(url: str) -> str:
    """
    Parse a git repository URL into a host/path form.

    Examples:
        https://github.com/user/repo.git -> github.com/user/repo
        git@github.com:user/repo.git -> github.com/user/repo
        https://gitlab.com/group/subgroup/project -> gitlab.com/group/subgroup/project

    Args:
        url: Git repository URL

    Returns:
        Path-like string (e.g., "github.com/user/repo")
    """
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[:-4]

    # SSH URLs (git@host:path)
    ssh_match = re.match(r"^[\w.-]+@([^:/]+):(.+)$", url)
    if ssh_match:
        host, path = ssh_match.groups()
        return f"{host}/{path}"

    parsed = urlparse(url)
    if parsed.netloc and parsed.path:
        host = parsed.hostname or parsed.netloc
        return f"{host}/{parsed.path.lstrip('/')}"

    # Local paths and anything else
    return url.replace(":", "/")


def repo_dir_name(url: str) -> str:
    """
    Directory name git would pick when cloning the URL.

    Examples:
        https://github.com/user/repo.git -> repo
        /srv/git/project/ -> project
    """
    name = parse_repo_url(url).rstrip("/").split("/")[-1]
    if not name:
        raise ValueError(f"Cannot derive a directory name from '{url}'")
    return name
