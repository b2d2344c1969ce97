from rsyncdir.types.base import RsyncDirBaseModel

__all__ = ["RsyncDirBaseModel"]
