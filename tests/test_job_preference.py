from codemocklab.models.job_preference import UserJobPreference

from conftest import auth_headers_for, make_user

URL = "/api/job-preference"


def save(client, headers, **fields):
    payload = {"company": "字节跳动", "position": "前端工程师", "level": "senior"}
    payload.update(fields)
    return client.post(URL, json=payload, headers=headers)


def test_latest_is_empty_without_preferences(client, auth_headers):
    response = client.get(URL, headers=auth_headers)

    assert response.json() == {"success": True, "data": None}


def test_save_and_read_latest(client, auth_headers):
    saved = save(
        client,
        auth_headers,
        jobResponsibilities=["负责前端架构"],
        customCompany="字节",
    ).json()["data"]

    assert saved["usageCount"] == 1
    assert saved["customCompany"] == "字节"
    assert saved["jobResponsibilities"] == ["负责前端架构"]

    latest = client.get(URL, headers=auth_headers).json()["data"]
    assert latest["id"] == saved["id"]


def test_same_configuration_reuses_row(client, auth_headers, db):
    first = save(client, auth_headers).json()["data"]
    second = save(client, auth_headers, requirements="熟悉React").json()["data"]

    assert second["id"] == first["id"]
    assert second["usageCount"] == 2
    assert second["requirements"] == "熟悉React"
    assert db.query(UserJobPreference).count() == 1


def test_only_one_default(client, auth_headers):
    first = save(client, auth_headers, isDefault=True).json()["data"]
    second = save(client, auth_headers, position="后端工程师", isDefault=True).json()["data"]

    default = client.get(URL, params={"type": "default"}, headers=auth_headers).json()
    assert default["data"]["id"] == second["id"]

    everything = client.get(URL, params={"type": "all"}, headers=auth_headers).json()["data"]
    assert [p["id"] for p in everything] == [second["id"], first["id"]]
    assert [p["isDefault"] for p in everything] == [True, False]


def test_invalid_level_is_rejected(client, auth_headers):
    response = save(client, auth_headers, level="intern")

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_unknown_query_type(client, auth_headers):
    response = client.get(URL, params={"type": "oldest"}, headers=auth_headers)

    assert response.status_code == 400


def test_delete_preference(client, auth_headers, db):
    saved = save(client, auth_headers).json()["data"]

    response = client.delete(URL, params={"id": saved["id"]}, headers=auth_headers)

    assert response.json() == {"success": True, "message": "删除成功"}
    assert db.query(UserJobPreference).count() == 0


def test_delete_requires_id(client, auth_headers):
    response = client.delete(URL, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_REQUIRED_FIELD"


def test_cannot_delete_another_users_preference(client, auth_headers, db):
    saved = save(client, auth_headers).json()["data"]
    stranger = make_user(db, email="stranger@example.com")

    response = client.delete(
        URL, params={"id": saved["id"]}, headers=auth_headers_for(stranger)
    )

    assert response.status_code == 404
    assert response.json()["error"] == "偏好设置不存在"
