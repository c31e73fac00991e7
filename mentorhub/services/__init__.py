# mentorhub/services/__init__.py
from .file_service import FileService, get_file_service
from .statistics import SubmissionStats, ResourceStats, aggregate_submissions, aggregate_resources
__all__ = ['FileService', 'get_file_service', 'SubmissionStats', 'ResourceStats',
           'aggregate_submissions', 'aggregate_resources']
