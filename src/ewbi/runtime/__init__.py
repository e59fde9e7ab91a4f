"""Reconcile scheduling runtime."""

from ewbi.runtime.manager import ControllerManager, ManagerConfig

__all__ = ["ControllerManager", "ManagerConfig"]
