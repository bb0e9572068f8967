import json

import pytest

from conftest import profile_form
from portal.models import EmployeeProfile, Project, Milestone
import portal.services.profile_creation as profile_creation


PNG = ("avatar.png", b"\x89PNG\r\n\x1a\nfake", "image/png")
MP4 = ("intro.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")


def stored_files(upload_dir):
    return sorted(p.name for p in upload_dir.iterdir()) if upload_dir.exists() else []


def test_one_project_with_two_milestones(client, auth_headers, count_rows):
    projects = [{
        "name_project": "Website",
        "status": "in progress",
        "completion": 0.4,
        "start_date": "2024-02-01",
        "due_date": "2024-06-30",
        "milestones": [
            {"milestone_name": "Design", "status": "completed", "completed_date": "2024-03-01"},
            {"milestone_name": "Build", "responsible_party": "Dev team"},
        ],
    }]
    response = client.post("/api/employees", data=profile_form(projects=projects), headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert len(body["projectData"]) == 1
    assert len(body["milestoneData"]) == 2

    employee = body["employeeData"]
    project = body["projectData"][0]
    assert employee["email"] == "jane@acme.test"
    assert employee["active"] is True
    assert employee["total_spent"] == 1500.5
    assert employee["joined_date"] == "2024-01-15"
    assert project["employee_id"] == employee["id"]
    assert project["email"] == "jane@acme.test"
    for milestone in body["milestoneData"]:
        assert milestone["project_id"] == project["id"]
        assert milestone["employees_id"] == employee["id"]
    assert body["milestoneData"][1]["status"] == "pending"

    assert count_rows(EmployeeProfile) == 1
    assert count_rows(Project) == 1
    assert count_rows(Milestone) == 2


def test_many_projects_bind_milestones_in_order(create_profile):
    projects = [
        {"name_project": f"P{i}", "milestones": [{"milestone_name": f"P{i}-M{j}"} for j in range(i)]}
        for i in range(4)
    ]
    body = create_profile(projects=projects)

    assert [p["name_project"] for p in body["projectData"]] == ["P0", "P1", "P2", "P3"]
    ids = {p["name_project"]: p["id"] for p in body["projectData"]}
    assert len(body["milestoneData"]) == 0 + 1 + 2 + 3
    for milestone in body["milestoneData"]:
        owner = milestone["milestone_name"].split("-")[0]
        assert milestone["project_id"] == ids[owner]


def test_missing_values_fall_back_to_defaults(create_profile):
    body = create_profile(projects=[{"milestones": [{}]}])

    project = body["projectData"][0]
    assert project["name_project"] == "N/A"
    assert project["status"] == "start"
    assert project["completion"] is None
    assert project["start_date"] is None
    milestone = body["milestoneData"][0]
    assert milestone["milestone_name"] == "Unnamed Milestone"
    assert milestone["status"] == "pending"


def test_milestone_refs_bind_across_projects(create_profile):
    projects = [
        {"ref": "web", "name_project": "Website", "milestones": [
            {"milestone_name": "Launch"},
            {"milestone_name": "App store listing", "project_ref": "app"},
        ]},
        {"ref": "app", "name_project": "Mobile app"},
    ]
    body = create_profile(projects=projects)

    ids = {p["name_project"]: p["id"] for p in body["projectData"]}
    by_name = {m["milestone_name"]: m for m in body["milestoneData"]}
    assert by_name["Launch"]["project_id"] == ids["Website"]
    assert by_name["App store listing"]["project_id"] == ids["Mobile app"]


def test_milestone_with_unknown_ref_is_skipped(create_profile, count_rows, caplog):
    projects = [{"ref": "web", "milestones": [
        {"milestone_name": "Kept"},
        {"milestone_name": "Orphan", "project_ref": "nowhere"},
    ]}]
    body = create_profile(projects=projects)

    assert [m["milestone_name"] for m in body["milestoneData"]] == ["Kept"]
    assert count_rows(Milestone) == 1
    assert "skipping milestone 'Orphan'" in caplog.text


def test_duplicate_project_refs_are_rejected(client, auth_headers, count_rows):
    projects = [{"ref": "x"}, {"ref": "x"}]
    response = client.post("/api/employees", data=profile_form(projects=projects), headers=auth_headers)

    assert response.status_code == 400
    assert "duplicate project ref" in response.json()["error"]
    assert count_rows(EmployeeProfile) == 0


def test_uploaded_media_is_stored_and_served(client, auth_headers, upload_dir):
    response = client.post(
        "/api/employees",
        data=profile_form(),
        files={"image": PNG, "video_file": MP4},
        headers=auth_headers,
    )
    assert response.status_code == 201
    employee = response.json()["employeeData"]

    assert employee["image"].startswith("http://testserver/uploads/image-")
    assert employee["image"].endswith(".png")
    assert employee["video_url"].startswith("http://testserver/uploads/video_file-")
    assert employee["video_url"].endswith(".mp4")
    assert len(stored_files(upload_dir)) == 2

    served = client.get(employee["image"].replace("http://testserver", ""))
    assert served.status_code == 200
    assert served.content == PNG[1]

    # the row keeps the relative path, the response carries the absolute URL
    stored = client.get(f"/api/edit-profile-data/{employee['id']}", headers=auth_headers).json()
    assert stored["image"].startswith("/uploads/image-")


@pytest.mark.parametrize("projects", ["{not json", '"a string"', '[1, 2]'])
def test_malformed_projects_are_rejected(client, auth_headers, count_rows, upload_dir, projects):
    response = client.post(
        "/api/employees",
        data=profile_form(projects=projects),
        files={"image": PNG},
        headers=auth_headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "projects must be valid structured data"
    assert count_rows(EmployeeProfile) == 0
    assert count_rows(Project) == 0
    assert stored_files(upload_dir) == []


def test_empty_projects_are_rejected(client, auth_headers, count_rows, upload_dir):
    response = client.post(
        "/api/employees",
        data=profile_form(projects="[]"),
        files={"video_file": MP4},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "project data is missing or empty"
    assert count_rows(EmployeeProfile) == 0
    assert stored_files(upload_dir) == []


def test_missing_projects_field_is_rejected(client, auth_headers):
    form = profile_form()
    del form["projects"]
    response = client.post("/api/employees", data=form, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "project data is missing or empty"


def test_invalid_milestone_date_is_rejected(client, auth_headers, count_rows):
    projects = [{"milestones": [{"milestone_name": "Design", "completed_date": "someday"}]}]
    response = client.post("/api/employees", data=profile_form(projects=projects), headers=auth_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["error"].startswith("projects.0.milestones.0.completed_date")
    assert body["details"][0]["loc"] == ["projects", 0, "milestones", 0, "completed_date"]
    assert count_rows(Milestone) == 0


def test_duplicate_email_rolls_back_and_removes_files(create_profile, client, auth_headers,
                                                      count_rows, upload_dir):
    create_profile(email="taken@acme.test")
    assert stored_files(upload_dir) == []

    projects = [{"name_project": "Other", "milestones": [{"milestone_name": "M1"}]}]
    response = client.post(
        "/api/employees",
        data=profile_form(email="taken@acme.test", projects=projects),
        files={"image": PNG, "video_file": MP4},
        headers=auth_headers,
    )

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "email" in body["error"]
    assert count_rows(EmployeeProfile) == 1
    assert count_rows(Project) == 1
    assert count_rows(Milestone) == 0
    assert stored_files(upload_dir) == []


def test_failure_after_project_insert_leaves_no_rows(client, auth_headers, count_rows,
                                                     upload_dir, monkeypatch):
    def exploding_milestone(**kwargs):
        raise RuntimeError("milestone insert failed")

    monkeypatch.setattr(profile_creation, "Milestone", exploding_milestone)
    projects = [{"name_project": "Website", "milestones": [{"milestone_name": "Design"}]}]
    response = client.post(
        "/api/employees",
        data=profile_form(projects=projects),
        files={"image": PNG},
        headers=auth_headers,
    )

    assert response.status_code == 500
    assert response.json()["error"] == "milestone insert failed"
    assert count_rows(EmployeeProfile) == 0
    assert count_rows(Project) == 0
    assert stored_files(upload_dir) == []


def test_projects_field_accepts_nested_json_text(create_profile):
    projects = json.dumps([{"name_project": "Audit", "completion": "0.5"}])
    body = create_profile(projects=projects)
    assert body["projectData"][0]["completion"] == 0.5


def test_oversized_upload_is_rejected_before_storage(settings, tmp_path):
    from fastapi.testclient import TestClient
    from main import create_app

    small = settings.model_copy(update={"MAX_FILE_SIZE": 4})
    with TestClient(create_app(small)) as client:
        token = client.post(
            "/api/signup",
            json={"email": "admin@portal.test", "password": "secret1", "role": "admin"},
        ).json()["token"]
        response = client.post(
            "/api/employees",
            data=profile_form(),
            files={"image": PNG},
            headers={"Authorization": f"Bearer {token}"},
        )

    assert response.status_code == 400
    assert "avatar.png is too large" in response.json()["error"]
    assert stored_files(tmp_path / "uploads") == []


def test_numeric_refs_are_accepted(create_profile):
    projects = [
        {"ref": 1, "name_project": "Website", "milestones": [{"milestone_name": "Launch", "project_ref": 2}]},
        {"ref": 2, "name_project": "Mobile app", "milestones": [{"milestone_name": "Beta"}]},
    ]
    body = create_profile(projects=projects)

    ids = {p["name_project"]: p["id"] for p in body["projectData"]}
    by_name = {m["milestone_name"]: m for m in body["milestoneData"]}
    assert by_name["Launch"]["project_id"] == ids["Mobile app"]
    assert by_name["Beta"]["project_id"] == ids["Mobile app"]


def test_client_ref_does_not_clash_with_default_position(create_profile):
    projects = [
        {"ref": "1", "name_project": "A", "milestones": [{"milestone_name": "A1"}]},
        {"name_project": "B", "milestones": [{"milestone_name": "B1"}]},
    ]
    body = create_profile(projects=projects)

    ids = {p["name_project"]: p["id"] for p in body["projectData"]}
    by_name = {m["milestone_name"]: m for m in body["milestoneData"]}
    assert by_name["A1"]["project_id"] == ids["A"]
    assert by_name["B1"]["project_id"] == ids["B"]


def test_uploads_are_streamed_to_storage(app, client, auth_headers):
    received = []
    storage = app.state.storage
    original_upload = storage.upload_file

    async def recording_upload(file_content, **kwargs):
        received.append(file_content)
        return await original_upload(file_content=file_content, **kwargs)

    storage.upload_file = recording_upload
    response = client.post(
        "/api/employees",
        data=profile_form(),
        files={"video_file": MP4},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert len(received) == 1
    assert not isinstance(received[0], bytes)
    assert hasattr(received[0], "read")
