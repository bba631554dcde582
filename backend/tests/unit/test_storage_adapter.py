"""
腾讯云COS存储适配器单元测试
SDK客户端全部使用 MagicMock 替代，不访问网络
"""

import pytest
from unittest.mock import MagicMock, patch

from qcloud_cos.cos_exception import CosClientError

from chongyang.core.config.cos_config import COSConfig
from chongyang.core.storage import (
    ConfigurationError,
    SigningError,
    StorageWriteError,
    TencentCosAdapter,
    create_adapter,
    get_storage_service,
    list_available_adapters,
)
from tests.utils.storage_doubles import InMemoryStorage


@pytest.mark.unit
@pytest.mark.storage
class TestTencentCosAdapter:
    """COS适配器单元测试类"""

    @pytest.fixture
    def cos_config(self):
        return COSConfig(
            secret_id="test-secret-id",
            secret_key="test-secret-key",
            region="ap-test",
            bucket="test-bucket-1250000000",
        )

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.put_object.return_value = {'ETag': '"etag-123"'}
        client.get_presigned_url.return_value = "https://test-bucket.cos.ap-test.myqcloud.com/a.webp?sign=x"
        return client

    @pytest.fixture
    def adapter(self, cos_config, client):
        return TencentCosAdapter(config=cos_config, client=client)

    def test_init_with_incomplete_config(self):
        """缺少密钥时构造失败"""
        with pytest.raises(ConfigurationError):
            TencentCosAdapter(config=COSConfig(secret_id="id", bucket="bucket"))

    def test_init_builds_sdk_client(self, cos_config):
        """未注入客户端时使用配置创建SDK客户端"""
        with patch('chongyang.core.storage.adapters.tencent_cos.CosS3Client') as client_class:
            adapter = TencentCosAdapter(config=cos_config)

        client_class.assert_called_once()
        assert adapter._client is client_class.return_value

    @pytest.mark.asyncio
    async def test_put_success(self, adapter, client):
        """上传成功返回元数据并带上缓存头"""
        result = await adapter.put(
            "generated-images/p1/a.webp",
            b"webp-bytes",
            content_type="image/webp",
            cache_control="public, max-age=31536000"
        )

        assert result.key == "generated-images/p1/a.webp"
        assert result.size == len(b"webp-bytes")
        assert result.mime_type == "image/webp"
        assert result.bucket == "test-bucket-1250000000"
        assert result.etag == "etag-123"

        kwargs = client.put_object.call_args.kwargs
        assert kwargs['Bucket'] == "test-bucket-1250000000"
        assert kwargs['Key'] == "generated-images/p1/a.webp"
        assert kwargs['Body'] == b"webp-bytes"
        assert kwargs['ContentType'] == "image/webp"
        assert kwargs['CacheControl'] == "public, max-age=31536000"

    @pytest.mark.asyncio
    async def test_put_without_cache_control(self, adapter, client):
        await adapter.put("a.png", b"x", content_type="image/png")
        assert 'CacheControl' not in client.put_object.call_args.kwargs

    @pytest.mark.asyncio
    async def test_put_sdk_error(self, adapter, client):
        """SDK异常转换为 StorageWriteError，不重试"""
        client.put_object.side_effect = CosClientError("network down")

        with pytest.raises(StorageWriteError) as exc_info:
            await adapter.put("a.webp", b"x", content_type="image/webp")

        assert exc_info.value.code == "UPLOAD_ERROR"
        assert client.put_object.call_count == 1

    @pytest.mark.asyncio
    async def test_signed_url_expiry(self, adapter, client):
        """有效期按天换算为秒"""
        url = await adapter.signed_url("generated-images/p1/a.webp", expires_in_days=30)

        assert url.startswith("https://")
        kwargs = client.get_presigned_url.call_args.kwargs
        assert kwargs['Method'] == 'GET'
        assert kwargs['Key'] == "generated-images/p1/a.webp"
        assert kwargs['Expired'] == 30 * 86400
        assert kwargs['Params'] == {}

    @pytest.mark.asyncio
    async def test_signed_url_with_transform(self, adapter, client):
        """处理指令作为查询参数透传"""
        await adapter.signed_url("a.webp", expires_in_days=1, transform="imageMogr2/format/webp/quality/75")

        kwargs = client.get_presigned_url.call_args.kwargs
        assert kwargs['Params'] == {"imageMogr2/format/webp/quality/75": ''}
        assert kwargs['Expired'] == 86400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "   ", "/leading/slash.webp"])
    async def test_signed_url_invalid_key(self, adapter, client, key):
        with pytest.raises(SigningError) as exc_info:
            await adapter.signed_url(key)

        assert exc_info.value.code == "URL_ERROR"
        client.get_presigned_url.assert_not_called()

    @pytest.mark.asyncio
    async def test_signed_url_sdk_error(self, adapter, client):
        client.get_presigned_url.side_effect = CosClientError("bad credentials")

        with pytest.raises(SigningError):
            await adapter.signed_url("a.webp")

    @pytest.mark.asyncio
    async def test_exists(self, adapter, client):
        assert await adapter.exists("a.webp") is True

        client.head_object.side_effect = CosClientError("not found")
        assert await adapter.exists("a.webp") is False

    @pytest.mark.asyncio
    async def test_delete_failure_returns_false(self, adapter, client):
        assert await adapter.delete("a.webp") is True

        client.delete_object.side_effect = CosClientError("denied")
        assert await adapter.delete("a.webp") is False

    @pytest.mark.asyncio
    async def test_delete_many_does_not_stop_on_failure(self, adapter, client):
        """单个删除失败不影响其余"""
        client.delete_object.side_effect = [None, CosClientError("denied"), None]

        result = await adapter.delete_many(["a", "b", "c"])

        assert result.deleted == ["a", "c"]
        assert result.failed == ["b"]
        assert client.delete_object.call_count == 3


@pytest.mark.unit
@pytest.mark.storage
class TestStorageFactory:
    """存储工厂与批量签名测试类"""

    def test_tencent_cos_registered(self):
        assert "tencent_cos" in list_available_adapters()

    def test_unknown_adapter(self):
        with pytest.raises(ConfigurationError):
            create_adapter("no_such_adapter")

    def test_get_storage_service_builds_new_instance(self):
        config = COSConfig(secret_id="id", secret_key="key", bucket="bucket")
        with patch('chongyang.core.storage.adapters.tencent_cos.get_cos_config', return_value=config), \
                patch('chongyang.core.storage.adapters.tencent_cos.CosS3Client'):
            first = get_storage_service("tencent_cos")
            second = get_storage_service("tencent_cos")

        assert isinstance(first, TencentCosAdapter)
        assert first is not second

    @pytest.mark.asyncio
    async def test_signed_urls_skips_failures(self):
        """批量签名跳过失败的存储键"""
        storage = InMemoryStorage(fail_sign_keys={"bad.webp"})

        urls = await storage.signed_urls(["a.webp", "bad.webp", "/invalid"], expires_in_days=7)

        assert urls == {"a.webp": "https://signed.test/a.webp?days=7"}
