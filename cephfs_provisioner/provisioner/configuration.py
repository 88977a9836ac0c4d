"""Configuration options for the CephFS provisioner."""

from oslo_config import cfg

from .agent import DEFAULT_AGENT_PATH

# Configuration group name
CONF_GROUP = "cephfs_provisioner"
PROJECT = "cephfs-provisioner"

SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"


def _get_cephfs_provisioner_opts():
    """Get CephFS provisioner configuration options.

    Returns:
        List of oslo_config options
    """
    return [
        cfg.StrOpt(
            "provisioner_name",
            default="ceph.com/cephfs",
            help="Provisioner name published on PersistentVolumes and matched against StorageClasses",
        ),
        cfg.StrOpt(
            "agent_path",
            default=DEFAULT_AGENT_PATH,
            help="Path of the allocation agent executable that creates and removes CephFS shares",
        ),
        # Kubernetes API access
        cfg.StrOpt(
            "kube_api_endpoint",
            default=None,
            help=(
                "Kubernetes API server URL (e.g., https://10.0.0.1:6443). "
                "If unset, the in-cluster address from KUBERNETES_SERVICE_HOST and "
                "KUBERNETES_SERVICE_PORT is used."
            ),
        ),
        cfg.StrOpt(
            "kube_api_token_file",
            default=f"{SERVICE_ACCOUNT_DIR}/token",
            help="File containing the bearer token for the Kubernetes API",
        ),
        cfg.StrOpt(
            "kube_api_ca_bundle",
            default=f"{SERVICE_ACCOUNT_DIR}/ca.crt",
            help="CA bundle used to verify the Kubernetes API server certificate",
        ),
        cfg.BoolOpt(
            "kube_api_verify_ssl",
            default=True,
            help="Verify SSL certificates for Kubernetes API requests",
        ),
        cfg.IntOpt(
            "kube_api_timeout",
            default=30,
            min=1,
            max=300,
            help="Kubernetes API request timeout in seconds",
        ),
        cfg.IntOpt(
            "kube_api_retry_count",
            default=3,
            min=0,
            max=10,
            help="Number of retries for idempotent (GET) Kubernetes API requests",
        ),
        # Scheduler-facing REST API
        cfg.HostAddressOpt(
            "api_host",
            default="127.0.0.1",
            help="Bind address of the provisioner REST API",
        ),
        cfg.PortOpt(
            "api_port",
            default=8080,
            help="Bind port of the provisioner REST API",
        ),
    ]


def register_opts(conf, group=None):
    """Register CephFS provisioner configuration options.

    Args:
        conf: oslo_config.cfg.ConfigOpts instance
        group: Configuration group name (default: CONF_GROUP)
    """
    if group is None:
        group = CONF_GROUP
    conf.register_opts(_get_cephfs_provisioner_opts(), group=group)


def list_opts():
    """Return a list of options for oslo-config-generator.

    Returns:
        List of (group_name, options) tuples
    """
    return [
        (CONF_GROUP, _get_cephfs_provisioner_opts()),
    ]


def load_config(conf=None, config_files=None):
    """Register options and parse configuration files.

    Args:
        conf: oslo_config.cfg.ConfigOpts instance (default: cfg.CONF)
        config_files: Explicit config files; if empty, the project's default
            files (e.g. /etc/cephfs-provisioner/cephfs-provisioner.conf) are used

    Returns:
        The option group for this project
    """
    if conf is None:
        conf = cfg.CONF
    register_opts(conf)

    args = []
    for path in config_files or []:
        args.extend(["--config-file", path])
    conf(args, project=PROJECT)
    return conf[CONF_GROUP]
