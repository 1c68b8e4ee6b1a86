# modelsync Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "repository": {
        "repos_root": "~/.modelsync/repositories",
        "remote": "origin",
        "commit_message": "Model changes",
    },
    "transport": {
        "ssh_identity_file": "~/.ssh/id_rsa",
        "strict_host_key_checking": False,
        "additional_header_env": "MODELSYNC_ADDITIONAL_HEADER",
        "proxy": {
            "enabled": False,
            "host": None,
            "port": 8080,
        },
    },
    "conflicts": {
        "strategy": "prompt",
    },
    "output": {
        "verbose": False,
        "colored": True,
        "log_file": None,
    },
}


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the defaults that callers may modify."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# modelsync configuration
#
# repository.repos_root: folder where `modelsync create` places new repositories
# transport.ssh_identity_file: private key used for ssh:// and git@host: remotes
# transport.additional_header_env: environment variable holding one extra
#   HTTP header in the form name:value
#
# Conflict strategies:
#   - prompt: ask for every conflicting file
#   - local:  keep the local version of every conflicting file
#   - remote: take the remote version of every conflicting file

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
