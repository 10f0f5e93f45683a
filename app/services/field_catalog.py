"""
Static field catalogs per documentation workflow
"""

from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from app.config import WorkflowType, FieldKind


# Physiological / plausibility ranges, inclusive
VALID_RANGES: Dict[str, Tuple[float, float]] = {
    "systolic": (70, 250),
    "diastolic": (40, 150),
    "heartRate": (30, 250),
    "temperature": (95, 107),
    "respiratoryRate": (8, 60),
    "oxygenSaturation": (70, 100),
    "painLevel": (0, 10),
    "length": (0.1, 50),
    "width": (0.1, 50),
    "depth": (0, 50),
}

# Fields derived together with another field
COMPANION_FIELDS: Dict[str, Tuple[str, ...]] = {
    "bloodPressure": ("systolic", "diastolic"),
}


class FieldMapping(BaseModel):
    """Catalog entry describing how a form field can be named aloud"""
    model_config = ConfigDict(frozen=True)

    field_key: str
    kind: FieldKind
    primary_labels: Tuple[str, ...]
    aliases: Tuple[str, ...] = ()
    medical_terms: Tuple[str, ...] = ()
    default: Optional[Any] = None
    # keyword -> canonical value, for choice fields
    choices: Dict[str, str] = Field(default_factory=dict)

    @property
    def form_default(self):
        if self.default is not None:
            return self.default
        return 0 if self.kind == FieldKind.NUMBER else ""

    @property
    def is_textarea(self) -> bool:
        return self.kind == FieldKind.TEXTAREA

    @property
    def value_range(self) -> Optional[Tuple[float, float]]:
        return VALID_RANGES.get(self.field_key)

    def all_labels(self) -> List[str]:
        return list(self.primary_labels) + list(self.aliases) + list(self.medical_terms)

    def segment_labels(self) -> List[str]:
        """Label phrases the segmenter scans for; single letters are matcher-only"""
        return [label for label in self.all_labels() if len(label) > 1]


def _field(field_key, kind, primary, aliases=(), terms=(), default=None, choices=None) -> FieldMapping:
    return FieldMapping(
        field_key=field_key,
        kind=kind,
        primary_labels=tuple(primary),
        aliases=tuple(aliases),
        medical_terms=tuple(terms),
        default=default,
        choices=choices or {},
    )


# --- Shared vital sign fields ---
SYSTOLIC = _field("systolic", FieldKind.NUMBER, ["systolic", "systolic pressure"], ["sys"], ["systolic blood pressure"])
DIASTOLIC = _field("diastolic", FieldKind.NUMBER, ["diastolic", "diastolic pressure"], ["dias"], ["diastolic blood pressure"])
BLOOD_PRESSURE = _field("bloodPressure", FieldKind.TEXT, ["blood pressure", "bp"], ["pressure"], ["arterial pressure"])
HEART_RATE = _field("heartRate", FieldKind.NUMBER, ["heart rate", "pulse"], ["hr", "pulse rate"], ["apical pulse", "radial pulse"])
TEMPERATURE = _field("temperature", FieldKind.NUMBER, ["temperature", "temp"], [], ["body temperature"])
RESPIRATORY_RATE = _field(
    "respiratoryRate", FieldKind.NUMBER,
    ["respiratory rate", "respirations"], ["rr", "respiration", "resp rate"], ["breathing rate"],
)
OXYGEN_SATURATION = _field(
    "oxygenSaturation", FieldKind.NUMBER,
    ["oxygen saturation", "o2 sat", "spo2"], ["oxygen sat", "o2", "pulse ox", "sats"], ["pulse oximetry"],
)
PAIN_LEVEL = _field("painLevel", FieldKind.NUMBER, ["pain level", "pain", "pain score"], ["pain scale"], ["pain rating", "pain intensity"])

TEMPERATURE_METHODS = {
    "oral": "oral", "orally": "oral",
    "tympanic": "tympanic", "ear": "tympanic",
    "axillary": "axillary", "under the arm": "axillary",
    "rectal": "rectal", "rectally": "rectal",
    "temporal": "temporal", "forehead": "temporal",
}

VITAL_SIGNS_MAPPINGS: List[FieldMapping] = [
    SYSTOLIC,
    DIASTOLIC,
    BLOOD_PRESSURE,
    HEART_RATE,
    TEMPERATURE,
    _field(
        "temperatureMethod", FieldKind.CHOICE,
        ["temperature method", "temp method"], [], ["temperature route"],
        default="oral", choices=TEMPERATURE_METHODS,
    ),
    RESPIRATORY_RATE,
    OXYGEN_SATURATION,
    PAIN_LEVEL,
]

MEDICATION_MAPPINGS: List[FieldMapping] = [
    _field("medicationName", FieldKind.TEXT, ["medication name", "medication", "med name", "drug name"], ["med", "drug"], ["medication administered"]),
    _field("dosage", FieldKind.TEXT, ["dosage", "dose", "amount"], ["dose given"], ["medication dose"]),
    _field("route", FieldKind.CHOICE, ["route", "route of administration", "administration route"], ["via"], []),
    _field("frequency", FieldKind.CHOICE, ["frequency", "how often"], ["schedule"], ["dosing frequency"]),
    _field("timeAdministered", FieldKind.TIME, ["time administered", "time given", "administered at", "given at"], [], []),
    _field(
        "patientResponse", FieldKind.TEXTAREA,
        ["patient response", "response", "patient reaction"],
        ["reaction", "effect", "patient effect"],
        ["therapeutic response", "medication response"],
    ),
    _field(
        "adverseReaction", FieldKind.TEXTAREA,
        ["adverse reaction", "adverse effects", "side effects"],
        ["adverse", "side effect", "adverse event", "adverse reactions"],
        ["adverse drug reaction", "adr", "medication adverse event"],
    ),
]

PATIENT_ASSESSMENT_MAPPINGS: List[FieldMapping] = [
    _field(
        "levelOfConsciousness", FieldKind.CHOICE,
        ["level of consciousness", "consciousness", "loc"], ["mental status"], ["neuro status", "neurological status"],
    ),
    _field("orientation", FieldKind.TEXT, ["orientation"], ["orientation status"], []),
    _field(
        "mobilityStatus", FieldKind.CHOICE,
        ["mobility status", "mobility"], ["ambulation", "ambulatory status"], ["gait", "activity level"],
    ),
    PAIN_LEVEL,
    _field(
        "skinCondition", FieldKind.TEXTAREA,
        ["skin condition", "skin", "skin integrity"], ["skin cond", "integument"],
        ["dermatological", "epidermis", "skin assessment"],
    ),
    _field(
        "observations", FieldKind.TEXTAREA,
        ["observations", "general observations", "notes", "additional notes"],
        ["obs", "general obs", "general notes"],
        ["clinical observations", "assessment notes"],
    ),
    _field(
        "assessment", FieldKind.TEXTAREA,
        ["assessment", "overall assessment"], ["assess", "impression"], ["nursing assessment", "clinical impression"],
    ),
]

WOUND_CARE_MAPPINGS: List[FieldMapping] = [
    _field("woundLocation", FieldKind.TEXT, ["wound location", "location", "wound site", "site"], [], ["anatomical location"]),
    _field("woundType", FieldKind.CHOICE, ["wound type", "type of wound", "wound kind"], [], ["wound etiology", "etiology"]),
    _field("woundStage", FieldKind.CHOICE, ["wound stage", "stage"], ["staging"], ["pressure injury stage", "pressure ulcer stage"]),
    _field("length", FieldKind.NUMBER, ["length", "wound length"]),
    _field("width", FieldKind.NUMBER, ["width", "wound width"]),
    _field("depth", FieldKind.NUMBER, ["depth", "wound depth"]),
    _field("drainageAmount", FieldKind.CHOICE, ["drainage amount", "drainage", "amount of drainage"], ["exudate amount"], ["exudate"], default="none"),
    _field("drainageType", FieldKind.CHOICE, ["drainage type", "type of drainage"], ["exudate type"], ["drainage character"], default="none"),
    _field(
        "treatmentProvided", FieldKind.TEXTAREA,
        ["treatment provided", "treatment", "care provided"],
        ["tx", "treatment given", "intervention", "dressing"],
        ["wound care", "wound treatment", "dressing change"],
    ),
]

SHIFT_HANDOFF_MAPPINGS: List[FieldMapping] = [
    _field(
        "outgoingNurse", FieldKind.TEXT,
        ["outgoing nurse", "outgoing", "off going nurse"], ["leaving nurse", "departing nurse", "outgoing nurse name"],
    ),
    _field(
        "incomingNurse", FieldKind.TEXT,
        ["incoming nurse", "incoming", "oncoming nurse"], ["arriving nurse", "relieving nurse", "incoming nurse name"],
    ),
    _field("situation", FieldKind.TEXTAREA, ["situation", "current status", "current situation"], ["s", "sit", "status"], ["sbar s", "sbar situation"]),
    _field("background", FieldKind.TEXTAREA, ["background", "history", "patient background"], ["b", "bg", "back"], ["sbar b", "sbar background", "medical history"]),
    _field("assessment", FieldKind.TEXTAREA, ["assessment", "findings", "clinical findings"], ["a", "assess"], ["sbar a", "sbar assessment", "clinical assessment"]),
    _field("recommendation", FieldKind.TEXTAREA, ["recommendation", "plan", "recommendations"], ["r", "rec"], ["sbar r", "sbar recommendation", "care plan"]),
    _field("pendingTasks", FieldKind.TEXTAREA, ["pending tasks", "pending", "tasks"], ["pending items", "to-do", "to do", "todos"]),
    _field("criticalAlerts", FieldKind.TEXTAREA, ["critical alerts", "alerts", "critical"], ["warnings", "critical items"]),
]

_VITAL_NUMBER_FIELDS = [SYSTOLIC, DIASTOLIC, BLOOD_PRESSURE, HEART_RATE, TEMPERATURE, RESPIRATORY_RATE, OXYGEN_SATURATION]

ADMISSION_MAPPINGS: List[FieldMapping] = [
    _field("chiefComplaint", FieldKind.TEXT, ["chief complaint", "complaint"], ["cc", "presenting complaint"], ["reason for visit"]),
    _field("admittingDiagnosis", FieldKind.TEXT, ["admitting diagnosis", "diagnosis"], ["dx", "admission diagnosis"], ["working diagnosis"]),
    _field(
        "admissionSource", FieldKind.CHOICE, ["admission source", "admitted from"], ["source"], ["arrival source"],
        choices={
            "emergency department": "ED", "emergency room": "ED", "ed": "ED", "er": "ED",
            "direct": "direct", "direct admit": "direct", "home": "direct",
            "transfer": "transfer", "transferred": "transfer", "outside hospital": "transfer",
        },
    ),
    _field(
        "codeStatus", FieldKind.CHOICE, ["code status"], ["code"], ["resuscitation status"],
        choices={
            "full code": "full-code", "full": "full-code",
            "dnr": "DNR", "do not resuscitate": "DNR",
            "dni": "DNI", "do not intubate": "DNI",
            "comfort care": "comfort-care", "comfort measures": "comfort-care",
        },
    ),
    _field("allergies", FieldKind.TEXTAREA, ["allergies", "allergy"], ["allergic to"], ["drug allergies", "known allergies"]),
    _field("medicalHistory", FieldKind.TEXTAREA, ["medical history", "past medical history", "history"], ["pmh", "hx"], ["surgical history"]),
    _field("currentMedications", FieldKind.TEXTAREA, ["current medications", "home medications", "medications"], ["meds", "home meds"], ["medication list"]),
] + _VITAL_NUMBER_FIELDS

DISCHARGE_MAPPINGS: List[FieldMapping] = [
    _field(
        "dischargeDisposition", FieldKind.CHOICE,
        ["discharge disposition", "disposition", "discharged to"], [], ["discharge destination"],
        choices={
            "home": "home", "home with services": "home-health", "home health": "home-health",
            "skilled nursing": "SNF", "snf": "SNF", "nursing home": "SNF",
            "rehab": "rehab", "rehabilitation": "rehab",
            "hospice": "hospice", "transfer": "transfer",
        },
    ),
    _field("dischargeInstructions", FieldKind.TEXTAREA, ["discharge instructions", "instructions"], ["patient instructions"], ["discharge teaching"]),
    _field("dischargeMedications", FieldKind.TEXTAREA, ["discharge medications", "medications"], ["meds", "discharge meds"], ["medication reconciliation"]),
    _field("followUp", FieldKind.TEXTAREA, ["follow up", "follow-up", "follow up appointments"], ["appointments"], ["follow up care"]),
    _field("warningSigns", FieldKind.TEXTAREA, ["warning signs", "return precautions"], ["red flags"], ["signs to watch for"]),
] + _VITAL_NUMBER_FIELDS

GENERAL_NOTE_MAPPINGS: List[FieldMapping] = [
    _field("observation", FieldKind.TEXTAREA, ["observation", "event"], ["what happened"], ["event description"]),
    _field("interventions", FieldKind.TEXTAREA, ["interventions", "actions taken"], ["actions", "intervention"], ["nursing interventions"]),
    _field("patientResponse", FieldKind.TEXTAREA, ["patient response", "response"], ["reaction"], ["response to intervention"]),
    _field("notifications", FieldKind.TEXTAREA, ["notifications", "notified"], ["physician notified", "family notified"]),
    _field("additionalNotes", FieldKind.TEXTAREA, ["additional notes", "notes"], ["comments"], ["concerns"]),
]


WORKFLOW_MAPPINGS: Dict[WorkflowType, List[FieldMapping]] = {
    WorkflowType.VITAL_SIGNS: VITAL_SIGNS_MAPPINGS,
    WorkflowType.MEDICATION_ADMINISTRATION: MEDICATION_MAPPINGS,
    WorkflowType.PATIENT_ASSESSMENT: PATIENT_ASSESSMENT_MAPPINGS,
    WorkflowType.WOUND_CARE: WOUND_CARE_MAPPINGS,
    WorkflowType.SHIFT_HANDOFF: SHIFT_HANDOFF_MAPPINGS,
    WorkflowType.ADMISSION: ADMISSION_MAPPINGS,
    WorkflowType.DISCHARGE: DISCHARGE_MAPPINGS,
    WorkflowType.GENERAL_NOTE: GENERAL_NOTE_MAPPINGS,
}


def get_workflow_mappings(workflow_type: WorkflowType) -> List[FieldMapping]:
    return WORKFLOW_MAPPINGS[WorkflowType(workflow_type)]
