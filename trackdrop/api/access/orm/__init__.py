from trackdrop.api.access.orm.access_log_model import AccessLogModel

__all__ = ["AccessLogModel"]
