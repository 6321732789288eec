"""Tests for API endpoints."""

import json

import pytest
from fastapi.testclient import TestClient

from label_verifier.main import app


client = TestClient(app)


@pytest.fixture
def application_payload():
    return {
        "brandName": "OLD TOM DISTILLERY",
        "classType": "Kentucky Straight Bourbon Whiskey",
        "beverageType": "distilled_spirits",
        "alcoholContent": "45% Alc./Vol. (90 Proof)",
        "proof": "90 Proof",
        "netContents": "750 mL",
        "producerName": "Old Tom Distillery",
        "producerAddress": "Bardstown, Kentucky",
    }


class TestHealthEndpoint:
    """Test health check endpoint."""

    def test_health_check(self):
        """Test health endpoint returns OK."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"


class TestRootEndpoint:
    """Test root endpoint."""

    def test_root(self):
        """Test root endpoint returns API info."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Label Verification API"
        assert "version" in data


class TestVerifyEndpoint:
    """Test single label verification endpoint."""

    def test_extracted_data(self, application_payload, extraction_payload):
        response = client.post("/api/v1/verify", json={
            "applicationData": application_payload,
            "extractedData": extraction_payload(),
            "processingTimeMs": 1500,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True

        result = data["result"]
        assert result["status"] == "approved"
        assert result["matchedFields"] == 5
        assert result["totalFields"] == 5
        assert result["governmentWarningCorrect"] is True
        assert result["humanReviewReasons"] == []
        assert result["processingTimeMs"] == 1500
        assert result["meetsTargetTime"] is True
        assert result["fieldVerifications"][0]["field"] == "Brand Name"
        assert "applicationValue" in result["fieldVerifications"][0]

    def test_raw_extraction_response(self, application_payload, extraction_payload):
        reply = "```json\n" + json.dumps(extraction_payload(brandName="OLD TIM DISTILLERS")) + "\n```"
        response = client.post("/api/v1/verify", json={
            "applicationData": application_payload,
            "extractionResponse": reply,
        })
        assert response.status_code == 200
        result = response.json()["result"]
        assert result["status"] == "needs_review"
        assert result["requiresHumanReview"] is True

    def test_unparseable_response(self, application_payload):
        response = client.post("/api/v1/verify", json={
            "applicationData": application_payload,
            "extractionResponse": "the label is blurry",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["result"] is None
        assert "Could not parse" in data["error"]

    def test_neither_extraction_source(self, application_payload):
        response = client.post("/api/v1/verify", json={"applicationData": application_payload})
        assert response.status_code == 400

    def test_both_extraction_sources(self, application_payload, extraction_payload):
        response = client.post("/api/v1/verify", json={
            "applicationData": application_payload,
            "extractedData": extraction_payload(),
            "extractionResponse": json.dumps(extraction_payload()),
        })
        assert response.status_code == 400

    def test_missing_required_application_field(self, application_payload, extraction_payload):
        del application_payload["brandName"]
        response = client.post("/api/v1/verify", json={
            "applicationData": application_payload,
            "extractedData": extraction_payload(),
        })
        assert response.status_code == 422


class TestBatchEndpoint:
    """Test JSON batch verification endpoint."""

    def test_batch(self, application_payload, extraction_payload):
        response = client.post("/api/v1/verify/batch", json={"labels": [
            {"id": "a.jpg", "applicationData": application_payload, "extractedData": extraction_payload()},
            {"id": "b.jpg", "applicationData": application_payload, "extractionResponse": "not json"},
        ]})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["jobId"]
        assert data["summary"]["total"] == 2
        assert data["summary"]["succeeded"] == 1
        assert data["summary"]["failed"] == 1
        assert data["summary"]["needsReview"] == 0
        assert [r["id"] for r in data["results"]] == ["a.jpg", "b.jpg"]
        assert data["results"][1]["error"]

    def test_batch_csv_export(self, application_payload, extraction_payload):
        response = client.post("/api/v1/verify/batch?format=csv", json={"labels": [
            {"id": "a.jpg", "applicationData": application_payload, "extractedData": extraction_payload()},
        ]})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0].startswith("Filename,Status")
        assert lines[1].startswith("a.jpg,approved")

    def test_empty_batch(self):
        response = client.post("/api/v1/verify/batch", json={"labels": []})
        assert response.status_code == 400

    def test_batch_too_large(self, application_payload, extraction_payload):
        labels = [
            {"id": f"{i}.jpg", "applicationData": application_payload, "extractedData": extraction_payload()}
            for i in range(51)
        ]
        response = client.post("/api/v1/verify/batch", json={"labels": labels})
        assert response.status_code == 400
        assert "maximum" in response.json()["detail"]

    def test_invalid_format(self, application_payload, extraction_payload):
        response = client.post("/api/v1/verify/batch?format=xml", json={"labels": [
            {"id": "a.jpg", "applicationData": application_payload, "extractedData": extraction_payload()},
        ]})
        assert response.status_code == 422


class TestBatchCSVEndpoint:
    """Test CSV upload batch endpoint."""

    CSV = (
        "filename,brand_name,class_type,alcohol_content,proof,net_contents,producer_name,producer_address\n"
        "a.jpg,OLD TOM DISTILLERY,Kentucky Straight Bourbon Whiskey,45% Alc./Vol. (90 Proof),90 Proof,"
        "750 mL,Old Tom Distillery,\"Bardstown, Kentucky\"\n"
        "b.jpg,OLD TOM DISTILLERY,Kentucky Straight Bourbon Whiskey,45% Alc./Vol. (90 Proof),90 Proof,"
        "750 mL,Old Tom Distillery,\"Bardstown, Kentucky\"\n"
    )

    def test_csv_batch(self, extraction_payload):
        extractions = {
            "a.jpg": extraction_payload(),
            "b.jpg": json.dumps(extraction_payload(governmentWarning="NOT_FOUND")),
        }
        response = client.post(
            "/api/v1/verify/batch/csv",
            files={
                "csv_file": ("applications.csv", self.CSV.encode(), "text/csv"),
                "extractions_file": ("extractions.json", json.dumps(extractions).encode(), "application/json"),
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["approved"] == 1
        assert data["summary"]["rejected"] == 1
        assert [r["result"]["status"] for r in data["results"]] == ["approved", "rejected"]

    def test_csv_batch_no_matching_rows(self, extraction_payload):
        response = client.post(
            "/api/v1/verify/batch/csv",
            files={
                "csv_file": ("applications.csv", self.CSV.encode(), "text/csv"),
                "extractions_file": ("extractions.json", json.dumps({"other.jpg": extraction_payload()}).encode(), "application/json"),
            },
        )
        assert response.status_code == 400
        assert "No valid CSV rows" in response.json()["detail"]

    def test_extractions_not_an_object(self):
        response = client.post(
            "/api/v1/verify/batch/csv",
            files={
                "csv_file": ("applications.csv", self.CSV.encode(), "text/csv"),
                "extractions_file": ("extractions.json", b"[]", "application/json"),
            },
        )
        assert response.status_code == 400
