import re
from enum import Enum


def _normalize_key(value: str) -> str:
    return re.sub(r"[^0-9a-z]", "", value.lower())


class _LabelledEnum(str, Enum):
    @classmethod
    def from_stored(cls, value: str | None):
        """Match a stored value on its label or member name, ignoring case and punctuation."""
        if not isinstance(value, str) or not value.strip():
            return None
        key = _normalize_key(value)
        for member in cls:
            if key in (_normalize_key(member.value), _normalize_key(member.name)):
                return member
        return None


class NatureOfCase(_LabelledEnum):
    CIVIL_RECOVERY = "Civil Recovery"
    CIVIL_PARTITION = "Civil Partition"
    CIVIL_INJUNCTION = "Civil Injunction"
    CIVIL_POSSESSION = "Civil Possession"
    CIVIL_PROBATE = "Civil Probate"
    ARBITRATION = "Arbitration"
    CIVIL_APPEAL = "Civil Appeal"
    CIVIL_EXECUTION = "Civil Execution"
    OTHER_CIVIL_SUIT = "Other Civil Suit"
    CRIMINAL_MATTER = "Criminal Matter"
    CRIMINAL_REVISION = "Criminal Revision"
    CRIMINAL_APPEAL = "Criminal Appeal"
    PETITION_FOR_DIVORCE = "Petition For Divorce"
    PETITION_FOR_MAINTENANCE = "Petition For Maintenance"
    PETITION_FOR_CUSTODY = "Petition For Custody"
    PETITION_FOR_DOMESTIC_VIOLENCE_ACT = "Petition For Domestic Voilence Act"
    CAW_CELL_N = "CawCell (N)"
    CAW_CELL_OD = "CawCell (OD)"
    PETITION_FOR_RECOVERY_OF_RENT = "Petition For Recovery Of Rent"
    PETITION_US_138_OF_NI_ACT_N_PASA_ACT = "Petition Us 138 of NI Act & PASA Act"
    PETITION_UNDER_ELECTRICITY_ACT = "PetitionUnderElectricityAct"
    MACT_CASE = "MACT Case"
    # lenient-decode fallback only, never accepted as input
    UNKNOWN = "Unknown"


class DisposalOfCase(_LabelledEnum):
    SETTLED = "Settled"
    NOT_SETTLED = "NotSettled"
    NOT_FIT_FOR_MEDIATION = "NotFitForMediation"
    PENDING = "Pending"


def selectable_natures() -> list[NatureOfCase]:
    return [n for n in NatureOfCase if n is not NatureOfCase.UNKNOWN]
