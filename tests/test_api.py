"""
Тесты для API
"""
import pytest
from fastapi.testclient import TestClient

from api_server import create_app

AUTH = {"Authorization": "Bearer test-api-key"}

ACCREDITATION_DATA = {
    "type": "ACCREDITATION",
    "organization_name": "Excellence Labs Inc.",
    "address": "456 Innovation Blvd, San Francisco, CA 94102",
    "issue_date": "2024-03-01",
    "expiration_date": "2027-03-01",
    "accredited_as": "ISO 17025:2017",
    "scope": "Chemical Testing Laboratory",
    "issue_no": "001"
}


class TestCertificateAPI:
    """Тесты для API сертификатов"""

    @pytest.fixture
    def app(self, settings):
        return create_app(settings)

    @pytest.fixture
    def client(self, app):
        """Тестовый клиент"""
        with TestClient(app) as client:
            yield client

    @pytest.fixture
    def created(self, client):
        """Созданный через API сертификат"""
        response = client.post("/api/certificates", json=ACCREDITATION_DATA, headers=AUTH)
        assert response.status_code == 201
        return response.json()

    def test_admin_requires_api_key(self, client):
        """Тест доступа без ключа"""
        assert client.get("/api/certificates").status_code == 401
        assert client.get("/api/certificates", headers={"Authorization": "Bearer wrong"}).status_code == 401
        assert client.post("/api/certificates", json=ACCREDITATION_DATA).status_code == 401
        assert client.get("/api/stats").status_code == 401

    def test_non_ascii_api_key_rejected(self, client):
        """Тест ключа с не-ASCII символами"""
        response = client.get("/api/certificates", headers={"Authorization": b"Bearer \xe9\xe9"})

        assert response.status_code == 401

    def test_admin_disabled_without_configured_key(self, settings):
        settings.admin_api_key = None

        with TestClient(create_app(settings)) as client:
            response = client.get("/api/certificates", headers=AUTH)

        assert response.status_code == 401

    def test_create_certificate_success(self, created):
        """Тест успешного создания сертификата"""
        assert created["status"] == "ACTIVE"
        assert created["certificate_number"].startswith("AAA-AC-")
        assert len(created["public_slug"]) == 12
        assert created["organization_name"] == "Excellence Labs Inc."
        assert created["issue_date"] == "2024-03-01"

    def test_create_certificate_missing_fields(self, client):
        """Тест создания сертификата без обязательных полей"""
        response = client.post(
            "/api/certificates",
            json={"type": "ACCREDITATION", "organization_name": "Labs", "address": ""},
            headers=AUTH
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields: address, issue_date, expiration_date"

    def test_create_certificate_invalid_type(self, client):
        response = client.post(
            "/api/certificates",
            json={**ACCREDITATION_DATA, "type": "DIPLOMA"},
            headers=AUTH
        )

        assert response.status_code == 400

    def test_get_certificate(self, client, created):
        """Тест получения сертификата без авторизации"""
        response = client.get(f"/api/certificates/{created['id']}")

        assert response.status_code == 200
        assert response.json()["certificate_number"] == created["certificate_number"]

    def test_get_certificate_not_found(self, client):
        response = client.get("/api/certificates/missing-id")

        assert response.status_code == 404
        assert response.json()["detail"] == "Certificate not found"

    def test_update_certificate(self, client, created):
        """Тест редактирования сертификата"""
        response = client.put(
            f"/api/certificates/{created['id']}",
            json={**ACCREDITATION_DATA, "organization_name": "Excellence Labs LLC", "status": "EXPIRED"},
            headers=AUTH
        )

        assert response.status_code == 200
        data = response.json()
        assert data["organization_name"] == "Excellence Labs LLC"
        assert data["status"] == "EXPIRED"
        assert data["certificate_number"] == created["certificate_number"]

    def test_update_certificate_not_found(self, client):
        response = client.put("/api/certificates/missing-id", json=ACCREDITATION_DATA, headers=AUTH)

        assert response.status_code == 404

    def test_set_status(self, client, created):
        """Тест смены статуса"""
        url = f"/api/certificates/{created['id']}/status"

        assert client.patch(url, json={"status": "PAUSED"}, headers=AUTH).json()["status"] == "PAUSED"

        response = client.patch(url, json={"status": "DELETED"}, headers=AUTH)
        assert response.status_code == 400
        assert "Invalid status" in response.json()["detail"]

        assert client.patch(url, json={}, headers=AUTH).status_code == 400

    def test_set_status_not_found(self, client):
        response = client.patch("/api/certificates/missing-id/status", json={"status": "PAUSED"}, headers=AUTH)

        assert response.status_code == 404

    def test_toggle_status(self, client, created):
        url = f"/api/certificates/{created['id']}/toggle"

        assert client.post(url, headers=AUTH).json()["status"] == "PAUSED"
        assert client.post(url, headers=AUTH).json()["status"] == "ACTIVE"

    def test_delete_twice(self, client, created):
        """Тест повторного удаления"""
        url = f"/api/certificates/{created['id']}"

        response = client.delete(url, headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert client.delete(url, headers=AUTH).status_code == 404
        assert client.get(url).status_code == 404

    def test_list_certificates(self, client):
        """Тест списка с пагинацией и фильтрами"""
        for index in range(12):
            data = {**ACCREDITATION_DATA, "organization_name": f"Lab {index:02d}"}
            assert client.post("/api/certificates", json=data, headers=AUTH).status_code == 201
        client.post("/api/certificates", json={
            **ACCREDITATION_DATA, "type": "ORGANIZATIONAL_MEMBERSHIP", "organization_name": "Member Org"
        }, headers=AUTH)

        response = client.get("/api/certificates", params={"page": 2, "limit": 5}, headers=AUTH)
        data = response.json()

        assert response.status_code == 200
        assert data["pagination"] == {"page": 2, "limit": 5, "total": 13, "pages": 3}
        assert len(data["certificates"]) == 5

        response = client.get(
            "/api/certificates",
            params={"type": "ORGANIZATIONAL_MEMBERSHIP", "status": "ACTIVE", "search": "member"},
            headers=AUTH
        )
        assert [c["organization_name"] for c in response.json()["certificates"]] == ["Member Org"]

    def test_list_invalid_filter(self, client):
        assert client.get("/api/certificates", params={"type": "DIPLOMA"}, headers=AUTH).status_code == 400
        assert client.get("/api/certificates", params={"page": 0}, headers=AUTH).status_code == 400

    def test_statistics(self, client, created):
        response = client.get("/api/stats", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["total_certificates"] == 1
        assert data["by_type"]["ACCREDITATION"] == 1
        assert data["recent"][0]["id"] == created["id"]

    def test_layout(self, client, created):
        response = client.get(f"/api/certificates/{created['id']}/layout", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["template"] == "accreditation"
        names = [element["name"] for element in data["elements"]]
        assert "qr_code" in names

    def test_admin_image(self, client, created):
        response = client.get(f"/api/certificates/{created['id']}/image", headers=AUTH)

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert f'filename="{created["certificate_number"]}.png"' in response.headers["content-disposition"]

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["components"]["database"]["status"] == "healthy"

    def test_health_without_assets(self, settings, tmp_path):
        """Тест здоровья без директории фоновых изображений"""
        settings.assets_path = tmp_path / "missing-assets"

        with TestClient(create_app(settings)) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["components"]["assets"]["status"] == "degraded"


class TestPublicAPI:
    """Тесты публичных страниц и поиска"""

    @pytest.fixture
    def client(self, settings):
        with TestClient(create_app(settings)) as client:
            yield client

    @pytest.fixture
    def created(self, client):
        response = client.post("/api/certificates", json=ACCREDITATION_DATA, headers=AUTH)
        return response.json()

    def pause(self, client, certificate):
        client.patch(f"/api/certificates/{certificate['id']}/status", json={"status": "PAUSED"}, headers=AUTH)

    def test_search(self, client, created):
        """Тест публичного поиска"""
        response = client.get("/api/search", params={"q": "excellence"})

        assert response.status_code == 200
        assert response.json()["found"] is True
        assert response.json()["certificate"]["id"] == created["id"]

        response = client.get("/api/search", params={"q": created["certificate_number"]})
        assert response.json()["found"] is True

    def test_search_short_query(self, client):
        response = client.get("/api/search", params={"q": "a"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Search query must be at least 2 characters"
        assert client.get("/api/search").status_code == 400

    def test_search_skips_paused(self, client, created):
        self.pause(client, created)

        response = client.get("/api/search", params={"q": "excellence"})

        assert response.status_code == 200
        assert response.json() == {"found": False, "certificate": None}

    def test_public_view(self, client, created):
        response = client.get(f"/api/public/{created['public_slug']}")

        assert response.status_code == 200
        assert response.json()["restricted"] is False
        assert response.json()["certificate"]["id"] == created["id"]

    def test_public_view_restricted(self, client, created):
        """Тест скрытия данных приостановленного сертификата"""
        self.pause(client, created)

        data = client.get(f"/api/public/{created['public_slug']}").json()

        assert data["restricted"] is True
        assert data["status"] == "PAUSED"
        assert data["certificate"] is None

    def test_public_view_not_found(self, client):
        assert client.get("/api/public/no-such-slug").status_code == 404

    def test_certificate_page(self, client, created):
        """Тест HTML страницы сертификата"""
        response = client.get(f"/certificate/{created['public_slug']}")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Excellence Labs Inc." in response.text
        assert "data:image/png;base64," in response.text
        assert f"/certificate/{created['public_slug']}/download" in response.text

    def test_certificate_page_restricted(self, client, created):
        self.pause(client, created)

        response = client.get(f"/certificate/{created['public_slug']}")

        assert response.status_code == 200
        assert "Certificate Not Available" in response.text
        assert "Excellence Labs Inc." not in response.text

    def test_certificate_page_not_found(self, client):
        response = client.get("/certificate/no-such-slug")

        assert response.status_code == 404
        assert "Certificate Not Found" in response.text

    def test_download(self, client, created):
        """Тест скачивания PNG"""
        response = client.get(f"/certificate/{created['public_slug']}/download")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_download_restricted(self, client, created):
        self.pause(client, created)

        assert client.get(f"/certificate/{created['public_slug']}/download").status_code == 403

    def test_index_search(self, client, created):
        response = client.get("/", params={"q": "excellence"})

        assert response.status_code == 200
        assert f"/certificate/{created['public_slug']}" in response.text

        response = client.get("/", params={"q": "x"})
        assert "at least 2 characters" in response.text
