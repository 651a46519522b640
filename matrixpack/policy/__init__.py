"""Host blocking and failure-injection policy."""

from matrixpack.policy.config import (
    STATE_FILE_ENV_VAR,
    default_state_path,
    load_policy_from_file,
    load_policy_or_default,
    policy_from_config,
    policy_to_config,
    save_policy_to_file,
)
from matrixpack.policy.engine import (
    ALLOW,
    BLOCKED_SESSION_MARKER,
    Decision,
    FailureType,
    InterceptionPolicy,
    PolicySnapshot,
)
from matrixpack.policy.exceptions import (
    InvalidHostTokenError,
    LiveMatrixError,
    PolicyConfigError,
    UnknownServiceError,
)
from matrixpack.policy.hosts import (
    BlockedHostSet,
    format_host_list,
    normalize_host,
    parse_host_list,
)
from matrixpack.policy.services import (
    EXTERNAL_SERVICES_SENTINEL,
    SERVICES,
    Service,
    get_service,
    list_service_names,
)
from matrixpack.policy.templates import (
    ResponseTemplate,
    get_template,
    list_template_ids,
    render_template_bytes,
)

__all__ = [
    "LiveMatrixError",
    "InvalidHostTokenError",
    "PolicyConfigError",
    "UnknownServiceError",
    "BlockedHostSet",
    "parse_host_list",
    "format_host_list",
    "FailureType",
    "Decision",
    "ALLOW",
    "BLOCKED_SESSION_MARKER",
    "PolicySnapshot",
    "InterceptionPolicy",
    "normalize_host",
    "Service",
    "SERVICES",
    "EXTERNAL_SERVICES_SENTINEL",
    "get_service",
    "list_service_names",
    "ResponseTemplate",
    "get_template",
    "list_template_ids",
    "render_template_bytes",
    "STATE_FILE_ENV_VAR",
    "default_state_path",
    "policy_from_config",
    "policy_to_config",
    "load_policy_from_file",
    "load_policy_or_default",
    "save_policy_to_file",
]
