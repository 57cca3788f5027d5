from .composition_root import AppRuntime, build_listener_config, build_log, build_runtime

__all__ = ["AppRuntime", "build_listener_config", "build_log", "build_runtime"]
