from datetime import datetime, timezone

import pytest

from app.checklist_template import generate_checklist
from app.errors import InvariantViolation
from app.schemas.job import ChecklistItemImage, ChecklistStatus, Job, JobStatus
from app.services import job_service

EARLIER = datetime(2024, 1, 1, tzinfo=timezone.utc)
LATER = datetime(2024, 1, 2, tzinfo=timezone.utc)


@pytest.fixture
def job():
    return Job(
        id="job-1",
        job_number="BIFOLD-100",
        status=JobStatus.PENDING,
        checklist=generate_checklist(),
        last_updated=EARLIER,
        updated_by="System",
    )


def test_update_item_replaces_only_the_matching_entry(job):
    colour = job.find_item("colour")
    edited = colour.model_copy(update={
        "status": ChecklistStatus.FAIL,
        "comment": "Wrong RAL",
        "images": [ChecklistItemImage(id="img-1", url="http://x/uploads/qc-images/a.png")],
    })

    updated = job_service.update_item(job, edited, "Supervisor A", now=LATER)

    assert updated.find_item("colour") == edited
    for before, after in zip(job.checklist, updated.checklist):
        if before.id != "colour":
            assert before == after
    assert len(updated.checklist) == len(job.checklist)
    assert updated.last_updated == LATER
    assert updated.updated_by == "Supervisor A"
    # the input job is untouched
    assert job.find_item("colour").status == ChecklistStatus.UNCHECKED


def test_update_item_with_unknown_id_fails_fast(job):
    stray = job.checklist[0].model_copy(update={"id": "not-on-template"})
    with pytest.raises(InvariantViolation):
        job_service.update_item(job, stray, "Supervisor A")


def test_update_item_cannot_flip_optional_flag(job):
    kitform = job.find_item("kitform").model_copy(update={"is_optional": False})
    with pytest.raises(InvariantViolation):
        job_service.update_item(job, kitform, "Supervisor A")


def test_toggle_same_status_twice_clears_it(job):
    item = job.find_item("cill")
    once = job_service.toggle_status(item, ChecklistStatus.PASS)
    twice = job_service.toggle_status(once, ChecklistStatus.PASS)

    assert once.status == ChecklistStatus.PASS
    assert twice.status == ChecklistStatus.UNCHECKED


def test_toggle_other_status_switches(job):
    item = job_service.toggle_status(job.find_item("cill"), ChecklistStatus.PASS)
    assert job_service.toggle_status(item, ChecklistStatus.FAIL).status == ChecklistStatus.FAIL


def test_edit_item_leaves_unspecified_fields(job):
    item = job.find_item("magnets").model_copy(update={"comment": "ok"})
    edited = job_service.edit_item(item, status=ChecklistStatus.PASS)
    assert edited.status == ChecklistStatus.PASS
    assert edited.comment == "ok"


def test_add_and_drop_image(job):
    item = job.find_item("threshold")
    image = ChecklistItemImage(id="img-9", url="http://x/uploads/qc-images/j/threshold/1.png")

    with_image = job_service.add_image(item, image)
    assert with_image.images == [image]
    assert job_service.drop_image(with_image, "img-9").images == []


def test_finalize_job_stamps_status_and_actor(job):
    checklist = [i if i.is_optional else i.model_copy(update={"status": ChecklistStatus.PASS}) for i in job.checklist]
    ready = job.model_copy(update={"checklist": checklist})

    finalized = job_service.finalize_job(ready, "Supervisor B", now=LATER)

    assert finalized.status == JobStatus.PASSED
    assert finalized.updated_by == "Supervisor B"
    assert finalized.last_updated == LATER


def test_replace_job_keeps_checklist_shape(job):
    checklist = [i.model_copy(update={"status": ChecklistStatus.PASS}) for i in job.checklist]
    replaced = job_service.replace_job(job, JobStatus.FAILED, checklist, "QA Lead", now=LATER)
    assert replaced.status == JobStatus.FAILED
    assert replaced.checklist == checklist


def test_replace_job_rejects_reordered_or_shortened_checklist(job):
    with pytest.raises(InvariantViolation):
        job_service.replace_job(job, JobStatus.PENDING, list(reversed(job.checklist)), "QA Lead")
    with pytest.raises(InvariantViolation):
        job_service.replace_job(job, JobStatus.PENDING, job.checklist[:-1], "QA Lead")


def test_replace_job_rejects_renamed_item(job):
    renamed = [job.checklist[0].model_copy(update={"name": "Renamed"}), *job.checklist[1:]]
    with pytest.raises(InvariantViolation):
        job_service.replace_job(job, JobStatus.PENDING, renamed, "QA Lead")


def test_summarize_reports_progress_and_label(job):
    item = job_service.toggle_status(job.find_item("colour"), ChecklistStatus.FAIL)
    edited = job_service.update_item(job, item, "Supervisor A")

    summary = job_service.summarize(edited)

    assert (summary.checked, summary.total) == (1, 18)
    assert summary.status_label == "Inspection Pending"
