# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/autobench/nodes/errors.py


class ProvisionError(RuntimeError):
    """A provisioning step failed. The host may be re-provisioned safely."""


class VolumeNotFoundError(ProvisionError):
    """No disk-type block device was found in the device listing."""


class PartitionProbeError(ProvisionError):
    """
    The partition probe itself failed, so it is unknown whether the volume
    is already partitioned. Never treated as "not partitioned".
    """


class FatalProvisionError(ProvisionError):
    """
    The host is left in a state that cannot be recovered automatically.
    Top-level callers are expected to stop the whole process on this.
    """


class RootBootstrapError(FatalProvisionError):
    """Rewriting root's authorized_keys or restarting sshd failed."""
