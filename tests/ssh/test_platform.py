import pytest

from autobench.ssh.errors import UnsupportedPlatformError
from autobench.ssh.platform import (
    AmazonLinux2,
    CentOS,
    Debian,
    Ubuntu,
    detect_platform,
    parse_os_release,
)

UBUNTU = """\
NAME="Ubuntu"
VERSION="20.04.6 LTS (Focal Fossa)"
ID=ubuntu
ID_LIKE=debian
VERSION_ID="20.04"
"""


def test_parse_os_release_strips_quotes_and_comments():
    fields = parse_os_release("# comment\nID='rocky'\n\nVERSION_ID=\"9.3\"\nbogus line\n")
    assert fields == {"ID": "rocky", "VERSION_ID": "9.3"}


@pytest.mark.parametrize(
    "text, cls",
    [
        ('ID="amzn"\nVERSION_ID="2"\n', AmazonLinux2),
        ('ID="centos"\n', CentOS),
        ('ID="rocky"\n', CentOS),
        (UBUNTU, Ubuntu),
        ('ID=debian\nVERSION_ID="12"\n', Debian),
    ],
)
def test_detect_platform(text, cls):
    assert isinstance(detect_platform(text), cls)


def test_detect_platform_unsupported():
    with pytest.raises(UnsupportedPlatformError, match="unsupported distribution 'unknown'"):
        detect_platform("")


def test_rpm_uninstall_tolerates_missing_package():
    cmd = AmazonLinux2().command_uninstall_packages("couchbase-server")
    assert cmd == "{ ! rpm -q couchbase-server >/dev/null 2>&1 || yum remove -y couchbase-server; }"


def test_uninstall_several_packages_chains():
    cmd = CentOS().command_uninstall_packages("a", "b")
    assert cmd.count("yum remove -y") == 2
    assert " && " in cmd


def test_deb_install_is_noninteractive():
    cmd = Ubuntu().command_install_package_at("/home/ec2-user/couchbase-server.deb")
    assert cmd == "env DEBIAN_FRONTEND=noninteractive apt-get install -y /home/ec2-user/couchbase-server.deb"


def test_disable_command_is_shared():
    assert AmazonLinux2().command_disable_couchbase() == Ubuntu().command_disable_couchbase()
    assert Ubuntu().command_disable_couchbase() == "systemctl disable --now couchbase-server"


def test_dependencies_include_mkfs_tooling():
    for platform in (AmazonLinux2(), CentOS(), Ubuntu()):
        assert "xfsprogs" in platform.dependencies()


def test_debian_dependencies_are_installable_on_current_releases():
    deps = Debian().dependencies()
    assert "libtinfo5" not in deps
    assert deps == ["bzip2", "libncurses6", "xfsprogs", "fdisk"]
    assert Debian().command_install_packages(*deps).startswith("env DEBIAN_FRONTEND=noninteractive apt-get install -y")
