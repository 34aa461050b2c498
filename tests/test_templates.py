"""
Tests for the message template endpoints.

Tests cover:
- Template creation and listing round trip
- Missing message text (400 plain text)
- Deletion (no auth, empty body)
- Authentication on create/list
"""


def new_template(client, headers, **fields):
    body = {"language": "en", "messageTxt": "Hi", "type": "reminder"}
    body.update(fields)
    return client.post("/newTemplate", json=body, headers=headers)


class TestNewTemplate:
    """Test POST /newTemplate."""

    def test_create_and_list(self, client, auth_headers):
        response = new_template(client, auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}

        listing = client.get("/templates", headers=auth_headers)
        assert listing.status_code == 200
        templates = listing.json()
        assert len(templates) == 1
        assert templates[0]["text"] == "Hi"
        assert templates[0]["language"] == "en"
        assert templates[0]["type"] == "reminder"
        assert templates[0]["_id"]

    def test_image_is_ignored(self, client, auth_headers):
        response = new_template(client, auth_headers, image="data:image/png;base64,AAAA")

        assert response.status_code == 200
        listing = client.get("/templates", headers=auth_headers).json()
        assert "image" not in listing[0]

    def test_empty_message_text(self, client, auth_headers):
        response = new_template(client, auth_headers, messageTxt="")

        assert response.status_code == 400
        assert response.text == "Please Enter Message Text!"

    def test_missing_message_text(self, client, auth_headers):
        response = client.post("/newTemplate", json={"language": "en", "type": "reminder"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.text == "Please Enter Message Text!"

    def test_requires_auth(self, client):
        response = client.post("/newTemplate", json={"language": "en", "messageTxt": "Hi", "type": "reminder"})

        assert response.status_code == 401


class TestTemplates:
    """Test GET /templates."""

    def test_empty_list(self, client, auth_headers):
        response = client.get("/templates", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_all(self, client, auth_headers):
        new_template(client, auth_headers, messageTxt="Hi")
        new_template(client, auth_headers, language="es", messageTxt="Hola")

        texts = sorted(t["text"] for t in client.get("/templates", headers=auth_headers).json())

        assert texts == ["Hi", "Hola"]

    def test_requires_auth(self, client):
        assert client.get("/templates").status_code == 401


class TestDeleteTemplate:
    """Test POST /deleteTemplate."""

    def test_delete(self, client, auth_headers):
        new_template(client, auth_headers)
        template_id = client.get("/templates", headers=auth_headers).json()[0]["_id"]

        response = client.post("/deleteTemplate", json={"id": template_id})

        assert response.status_code == 200
        assert response.content == b""
        assert client.get("/templates", headers=auth_headers).json() == []

    def test_delete_unknown_id(self, client):
        response = client.post("/deleteTemplate", json={"id": "0123456789abcdef01234567"})

        assert response.status_code == 200
