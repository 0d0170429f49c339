"""
HTTP API tests
"""
import uuid


def _create_party(client, headers, name="Nepali Congress", **extra):
    response = client.post("/api/parties", json={"name": name, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_list_is_public_and_camel_cased(client, admin_headers):
    _create_party(client, admin_headers, ideology="Social democracy, Liberalism", foundingDate="1947-01-25")

    response = client.get("/api/parties")
    assert response.status_code == 200
    body = response.json()
    assert body["totalCount"] == 1
    assert body["page"] == 1
    assert body["limit"] == 9
    party = body["items"][0]
    assert party["ideology"] == ["Social democracy", "Liberalism"]
    assert party["foundingDate"] == "1947-01-25"
    assert party["rating"] == 2.5


def test_oversized_limit_is_clamped(client, admin_headers):
    _create_party(client, admin_headers)

    response = client.get("/api/parties", params={"limit": 5000})
    assert response.status_code == 200
    body = response.json()
    assert body["limit"] == 100
    assert body["totalCount"] == 1

    assert client.get("/api/parties", params={"limit": 0}).status_code == 400


def test_get_missing_entity_is_404(client):
    response = client.get(f"/api/bills/{uuid.uuid4()}")
    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["message"] == "Bill not found"


def test_write_requires_login(client):
    response = client.post("/api/parties", json={"name": "Anonymous Party"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_non_admin_write_becomes_suggestion(client, user_headers, admin_headers):
    response = client.post("/api/promises", json={"title": "Free Wi-Fi in schools"}, headers=user_headers)
    assert response.status_code == 202
    assert response.json()["status"] == "pending_review"

    assert client.get("/api/promises").json()["totalCount"] == 0

    queue = client.get("/api/suggestions", headers=admin_headers).json()
    assert queue["totalCount"] == 1
    suggestion = queue["items"][0]
    assert suggestion["entityType"] == "promise"
    assert suggestion["isNewItemSuggestion"] is True

    approved = client.post(f"/api/suggestions/{suggestion['id']}/approve", headers=admin_headers)
    assert approved.status_code == 200
    entity_id = approved.json()["entityId"]

    promise = client.get(f"/api/promises/{entity_id}").json()
    assert promise["title"] == "Free Wi-Fi in schools"


def test_politician_create_is_admin_only(client, user_headers, admin_headers):
    response = client.post("/api/politicians", json={"name": "Balen Shah"}, headers=user_headers)
    assert response.status_code == 403

    response = client.post(
        "/api/politicians",
        json={"name": "Balen Shah", "province": "Bagmati", "tags": "mayor, independent"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["province"] == "Bagmati Province"
    assert body["tags"] == ["independent", "mayor"]


def test_validation_errors_are_400(client, admin_headers):
    party = _create_party(client, admin_headers)
    politician = client.post("/api/politicians", json={"name": "Someone"}, headers=admin_headers).json()

    response = client.post(
        "/api/bills",
        json={"title": "Two sponsors", "sponsorPoliticianId": politician["id"], "sponsorPartyId": party["id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_patch_vote_and_user_votes(client, admin_headers, user_headers):
    party = _create_party(client, admin_headers)

    response = client.patch(f"/api/parties/{party['id']}", json={"op": "vote", "voteType": "up"}, headers=user_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["userVote"] == "up"
    assert body["item"]["upvotes"] == 1
    assert body["item"]["rating"] == 5.0

    votes = client.get("/api/me/votes", headers=user_headers).json()["votes"]
    assert votes == {party["id"]: "up"}

    response = client.patch(f"/api/parties/{party['id']}", json={"op": "vote", "voteType": "up"}, headers=user_headers)
    body = response.json()
    assert body["userVote"] is None
    assert body["item"]["upvotes"] == 0


def test_patch_requires_known_op(client, admin_headers):
    party = _create_party(client, admin_headers)
    response = client.patch(f"/api/parties/{party['id']}", json={"op": "explode"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_patch_feature_is_admin_only(client, admin_headers, user_headers):
    party = _create_party(client, admin_headers)

    response = client.patch(f"/api/parties/{party['id']}", json={"op": "feature", "isFeatured": True}, headers=user_headers)
    assert response.status_code == 403

    response = client.patch(f"/api/parties/{party['id']}", json={"op": "feature", "isFeatured": True}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["item"]["isFeatured"] is True

    featured = client.get("/api/parties", params={"featured": "true"}).json()
    assert featured["totalCount"] == 1


def test_update_and_delete(client, admin_headers, user_headers):
    party = _create_party(client, admin_headers)

    response = client.put(f"/api/parties/{party['id']}", json={"name": "Nepali Congress", "headquarters": "Sanepa"}, headers=user_headers)
    assert response.status_code == 202

    response = client.put(f"/api/parties/{party['id']}", json={"name": "Nepali Congress", "headquarters": "Sanepa"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["headquarters"] == "Sanepa"

    assert client.delete(f"/api/parties/{party['id']}", headers=user_headers).status_code == 403
    response = client.delete(f"/api/parties/{party['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/api/parties/{party['id']}").status_code == 404


def test_duplicate_party_name_conflicts(client, admin_headers):
    _create_party(client, admin_headers)
    response = client.post("/api/parties", json={"name": "nepali congress"}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_NAME"


def test_my_suggestions_and_edit(client, user_headers, other_user_headers):
    created = client.post(
        "/api/suggestions",
        json={"entityType": "bill", "isNewItemSuggestion": True, "suggestedData": {"title": "Draft bill"}},
        headers=user_headers,
    )
    assert created.status_code == 201
    suggestion_id = created.json()["id"]

    mine = client.get("/api/suggestions/mine", headers=user_headers).json()
    assert [s["id"] for s in mine] == [suggestion_id]
    assert client.get("/api/suggestions/mine", headers=other_user_headers).json() == []

    forbidden = client.put(
        f"/api/suggestions/{suggestion_id}", json={"suggestedData": {"title": "Hijack"}}, headers=other_user_headers,
    )
    assert forbidden.status_code == 403

    edited = client.put(
        f"/api/suggestions/{suggestion_id}", json={"suggestedData": {"title": "Better draft"}}, headers=user_headers,
    )
    assert edited.status_code == 200
    assert edited.json()["suggestedData"]["title"] == "Better draft"


def test_me_reports_admin_from_email(client, admin_headers, user_headers):
    me = client.get("/api/me", headers=admin_headers).json()
    assert me["isAdmin"] is True
    assert me["fullName"] == "Site Admin"

    assert client.get("/api/me", headers=user_headers).json()["isAdmin"] is False
    assert client.get("/api/me").status_code == 401


def test_options_endpoints(client, admin_headers):
    _create_party(client, admin_headers, ideology="Social democracy")

    assert client.get("/api/options/ideologies").json() == ["Social democracy"]
    assert len(client.get("/api/options/provinces").json()) == 7
    parties = client.get("/api/options/parties").json()
    assert parties[0]["name"] == "Nepali Congress"
    assert client.get("/api/options/tags/unknown").status_code == 400


def test_unknown_route_uses_error_body(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert "error" in response.json()
