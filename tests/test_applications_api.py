import uuid

from educrm.scripts.seed_dev_data import SeedResult


def _create(client, seeded: SeedResult, **overrides) -> dict:
    payload = {
        "student_id": str(seeded.students["Asha Verma"]),
        "university_id": str(seeded.universities["University of Toronto"]),
        "program_name": "MSc Data Science",
    }
    payload.update(overrides)
    r = client.post(
        "/api/v1/applications",
        json=payload,
        headers={"X-Acting-User": str(seeded.staff["admin"])},
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_create_get_and_list(client, seeded):
    data = _create(client, seeded, application_date="2025-01-15")

    assert data["student_name"] == "Asha Verma"
    assert data["university_name"] == "University of Toronto"
    assert data["application_date"] == "2025-01-15"
    assert data["decision_status"] == "Pending"
    assert data["status"] == 0
    assert data["status_badge"] == "N/A"
    assert data["Application_stage"] is None
    assert data["travel_insurance"] is False

    r = client.get(f"/api/v1/applications/{data['id']}")
    assert r.status_code == 200, r.text
    assert r.json()["program_name"] == "MSc Data Science"

    r = client.get("/api/v1/applications")
    assert r.status_code == 200
    listing = r.json()
    assert listing["total"] == 1
    assert listing["items"][0]["id"] == data["id"]


def test_create_missing_required_field_names_it(client, seeded):
    r = client.post(
        "/api/v1/applications",
        json={
            "student_id": str(seeded.students["Asha Verma"]),
            "university_id": str(seeded.universities["University of Toronto"]),
            "program_name": " ",
        },
    )
    assert r.status_code == 422, r.text
    assert r.json()["field"] == "program_name"

    r = client.post("/api/v1/applications", json={"program_name": "MBA"})
    assert r.status_code == 422
    assert r.json()["field"] == "student_id"


def test_create_for_unknown_student_is_404(client, seeded):
    r = client.post(
        "/api/v1/applications",
        json={
            "student_id": str(uuid.uuid4()),
            "university_id": str(seeded.universities["University of Toronto"]),
            "program_name": "MBA",
        },
    )
    assert r.status_code == 404, r.text
    assert r.json()["detail"] == "Student not found"


def test_patch_editable_fields_and_reject_unknown_ones(client, seeded):
    app = _create(client, seeded)

    r = client.patch(
        f"/api/v1/applications/{app['id']}",
        json={"decision_status": "Accepted", "offer_letter": "https://files.example/offer.pdf"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["decision_status"] == "Accepted"
    assert r.json()["offer_letter"] == "https://files.example/offer.pdf"

    r = client.patch(f"/api/v1/applications/{app['id']}", json={"status": 1})
    assert r.status_code == 422


def test_progress_badge_and_list_filters(client, seeded):
    first = _create(client, seeded)
    second = _create(
        client,
        seeded,
        student_id=str(seeded.students["Rahul Iyer"]),
        university_id=str(seeded.universities["University of Melbourne"]),
    )

    r = client.patch(
        f"/api/v1/applications/{first['id']}/progress",
        json={"Application_stage": True, "Interview": True, "Visa_process": False},
    )
    assert r.status_code == 200, r.text
    assert r.json()["status_badge"] == "Interview Stage"
    assert r.json()["Interview"] is True

    r = client.patch(f"/api/v1/applications/{second['id']}/progress", json={"travel_insurance": True})
    assert r.status_code == 200, r.text

    r = client.get("/api/v1/applications", params={"step": "Interview"})
    assert [a["id"] for a in r.json()["items"]] == [first["id"]]

    r = client.get("/api/v1/applications", params={"step": "Visa"})
    assert r.json()["total"] == 0

    r = client.get("/api/v1/applications", params={"travel_insurance": "Complete"})
    assert [a["id"] for a in r.json()["items"]] == [second["id"]]

    r = client.get(
        "/api/v1/applications",
        params={"university": "University of Melbourne", "student": "Rahul Iyer"},
    )
    assert [a["id"] for a in r.json()["items"]] == [second["id"]]

    r = client.get("/api/v1/applications", params={"step": "Offer"})
    assert r.status_code == 422

    r = client.get("/api/v1/applications/filter-options")
    assert r.status_code == 200
    assert r.json() == {
        "universities": ["University of Melbourne", "University of Toronto"],
        "students": ["Asha Verma", "Rahul Iyer"],
    }


def test_toggle_verification_twice(client, seeded):
    app = _create(client, seeded)

    r = client.post(f"/api/v1/applications/{app['id']}/verification")
    assert r.status_code == 200, r.text
    assert r.json() == {"application_id": app["id"], "status": 1}

    r = client.post(f"/api/v1/applications/{app['id']}/verification")
    assert r.json()["status"] == 0

    assert client.get(f"/api/v1/applications/{app['id']}").json()["status"] == 0


def test_assign_counselor_creates_follow_up(client, seeded):
    app = _create(client, seeded)
    counselor_id = str(seeded.staff["counselor"])

    r = client.post(
        f"/api/v1/applications/{app['id']}/counselor",
        json={"counselor_id": counselor_id, "follow_up": "2025-05-01", "notes": "Check IELTS score"},
        headers={"X-Acting-User": str(seeded.staff["admin"])},
    )
    assert r.status_code == 201, r.text
    entry = r.json()
    assert entry["application_id"] == app["id"]
    assert entry["counselor_id"] == counselor_id
    assert entry["follow_up"] == "2025-05-01"
    assert entry["created_by"] == str(seeded.staff["admin"])

    assert client.get(f"/api/v1/applications/{app['id']}").json()["counselor_id"] == counselor_id

    r = client.get(f"/api/v1/applications/{app['id']}/follow-ups")
    assert r.status_code == 200
    assert [f["id"] for f in r.json()] == [entry["id"]]


def test_assign_counselor_validation_and_role_check(client, seeded):
    app = _create(client, seeded)

    r = client.post(
        f"/api/v1/applications/{app['id']}/counselor",
        json={"counselor_id": "", "follow_up": "2025-01-01"},
    )
    assert r.status_code == 422
    assert r.json()["field"] == "counselor_id"

    # A processor cannot be assigned as counselor.
    r = client.post(
        f"/api/v1/applications/{app['id']}/counselor",
        json={"counselor_id": str(seeded.staff["processor"]), "follow_up": "2025-01-01"},
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Counselor not found"


def test_assign_processor(client, seeded):
    app = _create(client, seeded)
    processor_id = str(seeded.staff["processor"])

    r = client.post(f"/api/v1/applications/{app['id']}/processor", json={"processor_id": processor_id})
    assert r.status_code == 200, r.text
    assert r.json()["processor_id"] == processor_id


def test_delete_twice_second_is_404(client, seeded):
    app = _create(client, seeded)
    client.post(
        f"/api/v1/applications/{app['id']}/counselor",
        json={"counselor_id": str(seeded.staff["counselor"]), "follow_up": "2025-05-01"},
    )

    r = client.delete(f"/api/v1/applications/{app['id']}")
    assert r.status_code == 204, r.text

    r = client.delete(f"/api/v1/applications/{app['id']}")
    assert r.status_code == 404
    assert r.json()["detail"] == "Application not found"

    assert client.get(f"/api/v1/applications/{app['id']}").status_code == 404


def test_malformed_id_is_404(client, seeded):
    r = client.get("/api/v1/applications/not-a-uuid")
    assert r.status_code == 404


def test_invalid_acting_user_header_is_422(client, seeded):
    r = client.post(
        "/api/v1/applications",
        json={"program_name": "MBA"},
        headers={"X-Acting-User": "someone"},
    )
    assert r.status_code == 422


def test_unknown_acting_user_is_rejected(client, seeded):
    r = client.post(
        "/api/v1/applications",
        json={
            "student_id": str(seeded.students["Asha Verma"]),
            "university_id": str(seeded.universities["University of Toronto"]),
            "program_name": "MBA",
        },
        headers={"X-Acting-User": str(uuid.uuid4())},
    )
    assert r.status_code == 422, r.text
    assert r.json()["field"] == "acting_user"

    assert client.get("/api/v1/applications").json()["total"] == 0
