"""Domain Enumerations - Permit status vocabulary and PEACH code definitions"""
from enum import Enum


class PermitPhase(str, Enum):
    """Permit phase (PEACH and the permit tracker both have a single phase today)"""
    APPLICATION = "Application"


class PermitStage(str, Enum):
    """Coarse permit status"""
    PRE_SUBMISSION = "Pre-submission"
    APPLICATION_SUBMISSION = "Application submission"
    TECHNICAL_REVIEW = "Technical review"
    PENDING_DECISION = "Pending decision"
    POST_DECISION = "Post-decision"


class PermitState(str, Enum):
    """Finer permit status within a stage"""
    NONE = "None"
    INITIAL_REVIEW = "Initial review"
    IN_PROGRESS = "In progress"
    PENDING_CLIENT = "Pending client action"
    APPROVED = "Approved"
    DENIED = "Denied"
    ISSUED = "Issued"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"
    CANCELLED = "Cancelled"
    ABANDONED = "Abandoned"


class PeachIntegratedSystem(str, Enum):
    """ITSM codes of source systems that publish records to PEACH"""
    TANTALIS = "ITSM-6072"
    ATS = "ITSM-5314"
    VFCBC = "ITSM-6117"


class PeachProcessCode(str, Enum):
    """
    PIES application_process codes, listed in process order

    A code_set holds up to three of these, e.g.
    APPLICATION > TECH_REVIEW_COMMENT > TECHNICAL_REVIEW.
    """
    APPLICATION = "APPLICATION"
    PRE_APPLICATION = "PRE_APPLICATION"
    SUBMITTED = "SUBMITTED"
    INITIAL_SUBMISSION_REVIEW = "INITIAL_SUBMISSION_REVIEW"
    SUBMISSION_REVIEW = "SUBMISSION_REVIEW"
    TECH_REVIEW_COMMENT = "TECH_REVIEW_COMMENT"
    TECHNICAL_REVIEW = "TECHNICAL_REVIEW"
    REFERRAL = "REFERRAL"
    FIRST_NATIONS_CONSULTATION = "FIRST_NATIONS_CONSULTATION"
    TECH_REVIEW_COMPLETED = "TECH_REVIEW_COMPLETED"
    DECISION = "DECISION"
    DECISION_REVIEW = "DECISION_REVIEW"
    ALLOWED = "ALLOWED"
    DISALLOWED = "DISALLOWED"
    ISSUANCE = "ISSUANCE"
    OFFERED = "OFFERED"
    ISSUED = "ISSUED"
    DECLINED = "DECLINED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class PeachTerminatedStage(str, Enum):
    """Terminal codes that only make sense together with the stage they ended"""
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
