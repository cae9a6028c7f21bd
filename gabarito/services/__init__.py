"""
Gabarito Services
=================

Business logic for accounts, assessments, grading, submissions, public
distribution links and the question bank.
"""
from .identity_store import IdentityStore
from .account_service import AccountService
from .catalog_service import CatalogService
from .grading_service import grade, summarize
from .submission_service import SubmissionService
from .distribution_service import DistributionService
from .question_bank import QuestionBank

__all__ = [
    'IdentityStore',
    'AccountService',
    'CatalogService',
    'grade',
    'summarize',
    'SubmissionService',
    'DistributionService',
    'QuestionBank',
]
