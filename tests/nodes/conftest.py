import pytest

from autobench.ssh.errors import RemoteCommandError
from autobench.ssh.platform import AmazonLinux2


# ----------------- Fake remote channel -----------------

class FakeChannel:
    """
    Records every call. ``responses`` maps a command substring to its stdout,
    ``failures`` maps a command substring (or a method name) to the exception
    to raise.
    """

    def __init__(self, host="10.0.0.11", responses=None, failures=None, platform=None):
        self.host = host
        self.ops = []
        self._responses = responses or {}
        self._failures = failures or {}
        self._platform = platform or AmazonLinux2()
        self.closed = False

    @property
    def platform(self):
        return self._platform

    def _maybe_fail(self, key):
        exc = self._failures.get(key)
        if exc is not None:
            raise exc

    def execute_command(self, command, *, sudo=False):
        command = str(command)
        self.ops.append(("exec", command, sudo))
        for needle, exc in self._failures.items():
            if needle in command:
                raise exc
        for needle, out in self._responses.items():
            if needle in command:
                return out
        return ""

    def install_packages(self, *names):
        self.ops.append(("install_packages", names))
        self._maybe_fail("install_packages")

    def uninstall_packages(self, *names):
        self.ops.append(("uninstall_packages", names))
        self._maybe_fail("uninstall_packages")

    def install_package_at(self, path):
        self.ops.append(("install_package_at", path))
        self._maybe_fail("install_package_at")

    def secure_upload(self, local_path, remote_path):
        self.ops.append(("secure_upload", local_path, remote_path))
        self._maybe_fail("secure_upload")

    def remove_file(self, path):
        self.ops.append(("remove_file", path))
        self._maybe_fail("remove_file")

    def remove_directory(self, path):
        self.ops.append(("remove_directory", path))
        self._maybe_fail("remove_directory")

    def close(self):
        self.ops.append(("close",))
        self.closed = True

    @property
    def commands(self):
        return [op[1] for op in self.ops if op[0] == "exec"]


def command_failed(command="cmd", rc=1, stderr="boom"):
    return RemoteCommandError(command, rc, "", stderr)


@pytest.fixture
def make_channel():
    return FakeChannel


@pytest.fixture
def failed():
    return command_failed
