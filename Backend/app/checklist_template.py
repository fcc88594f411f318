# app/checklist_template.py
from typing import List, NamedTuple

from app.schemas.job import ChecklistItem, ChecklistStatus


class ChecklistDefinition(NamedTuple):
    id: str
    name: str
    is_optional: bool = False


# Order matters: item ids double as storage path segments for attachments.
CHECKLIST_TEMPLATE = (
    ChecklistDefinition("configuration", "Configuration"),
    ChecklistDefinition("opening-direction", "Opening Direction"),
    ChecklistDefinition("colour", "Colour"),
    ChecklistDefinition("handle-colour", "Handle Colour"),
    ChecklistDefinition("cill", "Cill"),
    ChecklistDefinition("cill-end-caps", "Cill End Caps"),
    ChecklistDefinition("threshold", "Threshold"),
    ChecklistDefinition("drainage", "Drainage"),
    ChecklistDefinition("trickle-vents", "Trickle Vents"),
    ChecklistDefinition("kitform", "Kitform (if requested)", is_optional=True),
    ChecklistDefinition("kitform-hardware", "Kitform Hardware", is_optional=True),
    ChecklistDefinition("door-master-work", "Door Master Work"),
    ChecklistDefinition("bifold-smooth-operation", "Bifold Smooth Operation"),
    ChecklistDefinition("frame-joints-alignment", "Frame Joints Alignment"),
    ChecklistDefinition("sash-joints-alignment", "Sash Joints Alignment"),
    ChecklistDefinition("panel-alignment", "Panel Alignment / Consistent Gaps"),
    ChecklistDefinition("magnets", "Magnets"),
    ChecklistDefinition("overall-finish", "Overall Finish (Scratches / Dents / Marks)"),
)


def generate_checklist() -> List[ChecklistItem]:
    """Fresh, all-UNCHECKED checklist in template order."""
    return [
        ChecklistItem(
            id=definition.id,
            name=definition.name,
            is_optional=definition.is_optional,
            status=ChecklistStatus.UNCHECKED,
            comment="",
            images=[],
        )
        for definition in CHECKLIST_TEMPLATE
    ]
