"""
HTTP接口测试
使用 FastAPI TestClient，服务通过依赖覆盖替换为替身，不访问外部服务
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from chongyang.api.deps import get_generation_service, get_pipeline, get_reference_service
from chongyang.core.image import ImageInfo
from chongyang.services.generation import GenerationOutcome
from chongyang.services.image import ImageProcessResult, ReferenceImageService
from main import app
from tests.utils.image_utils import make_image_bytes
from tests.utils.storage_doubles import InMemoryStorage

API = "/api/v1"


def _stored(index: int) -> ImageProcessResult:
    return ImageProcessResult(
        success=True,
        url=f"https://signed.test/generated-images/p/{index}.webp?days=30",
        storage_key=f"generated-images/p/{index}.webp",
        original_size=1000,
        compressed_size=400,
        compression_ratio=60.0,
        source_url=f"https://ark.test/{index}.jpeg"
    )


@pytest.fixture
def generation_service():
    service = MagicMock()
    service.generate_image = AsyncMock(return_value=GenerationOutcome(
        success=True, images=[_stored(0), _stored(1)], requested_count=2, generated_count=2
    ))
    service.generate_images_batch = AsyncMock()
    return service


@pytest.fixture
def pipeline():
    return MagicMock()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def client(generation_service, pipeline, storage):
    app.dependency_overrides[get_generation_service] = lambda: generation_service
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_reference_service] = lambda: ReferenceImageService(storage)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.interface
class TestBasic:
    """基础接口测试类"""

    def test_health(self):
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_sizes(self):
        response = TestClient(app).get(f"{API}/images/sizes")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert [item["token"] for item in body["data"]] == ["2K", "4K"]

    def test_services_unavailable_without_storage(self):
        """存储未配置时图片服务返回503"""
        response = TestClient(app).post(f"{API}/images/generate", json={"prompt": "秋山红叶"})
        assert response.status_code == 503


@pytest.mark.interface
class TestGenerationApi:
    """图片生成接口测试类"""

    def test_generate(self, client, generation_service):
        response = client.post(f"{API}/images/generate", json={"prompt": "秋山红叶", "num_images": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert len(body["data"]["urls"]) == 2
        assert body["data"]["storage_keys"][0] == "generated-images/p/0.webp"

        request = generation_service.generate_image.call_args.args[0]
        assert request.prompt == "秋山红叶"
        assert request.num_images == 2

    def test_generate_schema_validation(self, client, generation_service):
        response = client.post(f"{API}/images/generate", json={"prompt": "p", "num_images": 9})

        assert response.status_code == 422
        generation_service.generate_image.assert_not_called()

    @pytest.mark.parametrize("error_code, status_code", [
        ("VALIDATION_ERROR", 400),
        ("PROVIDER_ERROR", 502),
        ("PROCESSING_FAILED", 500),
    ])
    def test_generate_failure_status(self, client, generation_service, error_code, status_code):
        generation_service.generate_image.return_value = GenerationOutcome.failure("失败了", error_code)

        response = client.post(f"{API}/images/generate", json={"prompt": "p"})

        assert response.status_code == status_code
        assert response.json()["detail"] == "失败了"

    def test_generate_batch(self, client, generation_service):
        generation_service.generate_images_batch.return_value = [
            GenerationOutcome(success=True, images=[_stored(0)], prompt="菊花"),
            GenerationOutcome.failure("API 调用失败", "PROVIDER_ERROR", prompt="登高"),
        ]

        response = client.post(
            f"{API}/images/generate/batch",
            json={"prompts": ["菊花", "登高"], "options": {"size": "4K"}}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 2
        assert data["succeeded"] == 1
        assert data["results"][1]["error_code"] == "PROVIDER_ERROR"

        prompts, options = generation_service.generate_images_batch.call_args.args
        assert prompts == ["菊花", "登高"]
        assert options.size == "4K"


@pytest.mark.interface
class TestProcessingApi:
    """图片处理接口测试类"""

    def test_process(self, client, pipeline):
        pipeline.process_one = AsyncMock(return_value=_stored(0))

        response = client.post(
            f"{API}/images/process",
            json={"source_url": "https://ark.test/0.jpeg", "quality": 70, "resize": {"width": 100, "height": 50}}
        )

        assert response.status_code == 200
        assert response.json()["data"]["storage_key"] == "generated-images/p/0.webp"
        kwargs = pipeline.process_one.call_args.kwargs
        assert kwargs["quality"] == 70
        assert (kwargs["resize"].width, kwargs["resize"].height) == (100, 50)

    def test_process_fetch_failure(self, client, pipeline):
        pipeline.process_one = AsyncMock(return_value=ImageProcessResult.failure(
            "https://ark.test/0.jpeg", "下载失败: 404 Not Found", "FETCH_ERROR"
        ))

        response = client.post(f"{API}/images/process", json={"source_url": "https://ark.test/0.jpeg"})

        assert response.status_code == 502

    def test_process_batch(self, client, pipeline):
        pipeline.process_batch = AsyncMock(return_value=[
            _stored(0),
            ImageProcessResult.failure("https://ark.test/1.jpeg", "下载失败", "FETCH_ERROR"),
        ])

        response = client.post(
            f"{API}/images/process/batch",
            json={"urls": ["https://ark.test/0.jpeg", "https://ark.test/1.jpeg"], "concurrency": 2}
        )

        data = response.json()["data"]
        assert data["succeeded"] == 1
        assert data["failed"] == 1
        assert pipeline.process_batch.call_args.kwargs["concurrency"] == 2

    def test_thumbnail(self, client, pipeline):
        pipeline.thumbnail = AsyncMock(return_value=_stored(0))

        response = client.post(f"{API}/images/thumbnail", json={"source_url": "https://ark.test/0.jpeg"})

        assert response.status_code == 200
        assert pipeline.thumbnail.call_args.kwargs["width"] == 300

    def test_metadata(self, client, pipeline):
        pipeline.image_metadata = AsyncMock(return_value=ImageInfo(width=10, height=20, format="webp", size=99))

        response = client.post(f"{API}/images/metadata", json={"url": "https://signed.test/a.webp"})

        assert response.json()["data"] == {"width": 10, "height": 20, "format": "webp", "size": 99}

    def test_metadata_unreadable(self, client, pipeline):
        pipeline.image_metadata = AsyncMock(return_value=None)

        response = client.post(f"{API}/images/metadata", json={"url": "https://signed.test/a.webp"})

        assert response.status_code == 404


@pytest.mark.interface
class TestFestivalApi:
    """重阳节活动接口测试类"""

    def test_upload(self, client, storage):
        jpeg = make_image_bytes(32, 32, "JPEG")

        response = client.post(
            f"{API}/festival/upload",
            files={"file": ("old.jpg", jpeg, "image/jpeg")},
            data={"client_id": "13800001234"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["key"].startswith("photo-restore/13800001234/")
        assert storage.objects[data["key"]] == jpeg

    def test_upload_rejects_unaccepted_type(self, client, storage):
        response = client.post(
            f"{API}/festival/upload",
            files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")}
        )

        assert response.status_code == 400
        assert storage.put_calls == []

    def test_photo_restore(self, client, storage, generation_service):
        png = make_image_bytes(32, 32, "PNG")

        response = client.post(
            f"{API}/festival/photo-restore",
            files={"file": ("old.png", png, "image/png")},
            data={"client_id": "13800001234"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["original_url"].startswith("https://signed.test/photo-restore/13800001234/")
        assert data["restored_url"] == _stored(0).url
        assert len(data["gallery"]) == 2

        request = generation_service.generate_image.call_args.args[0]
        assert request["prompt"].startswith("请对输入的老照片进行修复")
        assert request["image"] == data["original_url"]
        assert request["size"] == "2K"
        assert request["quality"] == "hd"
        assert request["project_id"].startswith("photo-restore/13800001234/")

    def test_photo_restore_generation_failure(self, client, generation_service):
        generation_service.generate_image.return_value = GenerationOutcome.failure(
            "所有图像处理都失败了", "PROCESSING_FAILED"
        )

        response = client.post(
            f"{API}/festival/photo-restore",
            files={"file": ("old.jpg", make_image_bytes(16, 16, "JPEG"), "image/jpeg")}
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "所有图像处理都失败了"

    def test_poem_image(self, client, generation_service):
        response = client.post(
            f"{API}/festival/poem-image",
            json={"keywords": "登高", "title": "九日", "client_id": "138"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["prompt"].startswith("标题：九日，登高，")
        assert data["image_url"] == _stored(0).url

        request = generation_service.generate_image.call_args.args[0]
        assert request["quality"] == "hd"
        assert request["project_id"].startswith("poem/138/")
