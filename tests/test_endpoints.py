import base64
import io
import re
import unittest
from unittest.mock import patch, MagicMock

from app import create_app
from studio.config import StudioSettings

from helpers import make_client, make_image_bytes, make_response, image_part, text_part


SCENE = "Café / Coffee shop"


def upload(width=120, height=90, name='photo.png'):
    return (io.BytesIO(make_image_bytes(width, height)), name)


def mock_download(content, headers=None, chunk_size=8192):
    """Streamed requests response yielding content in chunks"""
    mock_response = MagicMock()
    mock_response.headers = headers or {'Content-Type': 'image/jpeg'}
    mock_response.iter_content.return_value = [
        content[i:i + chunk_size] for i in range(0, len(content), chunk_size)
    ]
    return mock_response


class EndpointTestCase(unittest.TestCase):
    outcomes = (make_response(image_part(b'generated-png')),)

    def setUp(self):
        self.generation_client, self.fake, self.sleeps = make_client(*self.outcomes)
        self.app = create_app(
            settings=StudioSettings(retry_delay_s=0.0),
            generation_client=self.generation_client,
        )
        self.client = self.app.test_client()

    def post_generate(self, **data):
        data.setdefault('scene', SCENE)
        return self.client.post('/api/v1/generate', data=data, content_type='multipart/form-data')


class TestInfoEndpoints(EndpointTestCase):
    def test_health(self):
        response = self.client.get('/api/v1/health')
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body['status'], 'healthy')
        self.assertTrue(body['services']['gemini_configured'])

    def test_scenes(self):
        body = self.client.get('/api/v1/scenes').get_json()
        self.assertEqual(body['aspect_ratio'], '1:1')
        self.assertEqual(len(body['categories']), 6)

    def test_app_health(self):
        self.assertEqual(self.client.get('/health').status_code, 200)


class TestPrepareEndpoint(EndpointTestCase):
    def test_prepare_resizes(self):
        response = self.client.post(
            '/api/v1/prepare',
            data={'image': upload(2048, 1024)},
            content_type='multipart/form-data',
        )

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual((body['width'], body['height']), (1024, 512))
        self.assertTrue(body['preview'].startswith('data:image/jpeg;base64,'))

    def test_prepare_rejects_other_file_types(self):
        response = self.client.post(
            '/api/v1/prepare',
            data={'image': (io.BytesIO(b'hello'), 'notes.txt')},
            content_type='multipart/form-data',
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'VALIDATION_002')

    def test_prepare_requires_image(self):
        response = self.client.post('/api/v1/prepare', data={}, content_type='multipart/form-data')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'VALIDATION_001')

    def test_prepare_corrupt_image(self):
        response = self.client.post(
            '/api/v1/prepare',
            data={'image': (io.BytesIO(b'not an image'), 'broken.png')},
            content_type='multipart/form-data',
        )

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.get_json()['error_code'], 'PROCESSING_ERROR')


class TestGenerateEndpoint(EndpointTestCase):
    def test_generate_success(self):
        response = self.post_generate(person=upload(800, 600), product=upload(400, 400))

        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertTrue(body['success'])
        self.assertEqual(body['image'], 'data:image/png;base64,' + base64.b64encode(b'generated-png').decode())
        self.assertRegex(body['download_filename'], re.compile(r'^ugc-gen-\d+\.png$'))
        self.assertEqual(body['attempts'], 1)
        self.assertEqual(body['metadata']['scene'], SCENE)
        self.assertEqual(body['metadata']['category'], 'outdoor')
        self.assertIn(SCENE, self.fake.calls[0]['contents'][0].text)

    def test_missing_product(self):
        response = self.post_generate(person=upload())

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'MISSING_INPUT')
        self.assertEqual(self.fake.calls, [])

    def test_missing_scene(self):
        response = self.post_generate(person=upload(), product=upload(), scene='')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'MISSING_INPUT')

    def test_unknown_scene(self):
        response = self.post_generate(person=upload(), product=upload(), scene='Surface of the moon')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'VALIDATION_004')
        self.assertEqual(self.fake.calls, [])

    def test_corrupt_upload(self):
        response = self.post_generate(person=(io.BytesIO(b'garbage'), 'person.jpg'), product=upload())

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.get_json()['error_code'], 'PROCESSING_ERROR')
        self.assertEqual(self.fake.calls, [])

    def test_file_and_url_together(self):
        response = self.post_generate(
            person=upload(), person_url='https://example.com/p.jpg', product=upload()
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'VALIDATION_001')

    @patch('studio.utils.requests.get')
    def test_person_from_url(self, mock_get):
        mock_get.return_value = mock_download(make_image_bytes(300, 300, fmt='JPEG'))

        response = self.post_generate(person_url='https://example.com/person.jpg', product=upload())

        self.assertEqual(response.status_code, 200)
        mock_get.assert_called_once_with('https://example.com/person.jpg', timeout=15, stream=True)


class TestGenerateUrlSizeLimit(EndpointTestCase):
    def setUp(self):
        super().setUp()
        self.app.config['STUDIO_SETTINGS'] = StudioSettings(retry_delay_s=0.0, max_upload_mb=1)

    @patch('studio.utils.requests.get')
    def test_oversized_url_image_is_rejected(self, mock_get):
        body = make_image_bytes(300, 300) + b'\0' * (3 * 1024 * 1024)
        mock_response = mock_download(body)
        mock_get.return_value = mock_response

        response = self.post_generate(person_url='https://example.com/huge.png', product=upload())

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'VALIDATION_003')
        self.assertEqual(self.fake.calls, [])
        mock_response.close.assert_called_once()

    @patch('studio.utils.requests.get')
    def test_declared_length_over_limit_is_rejected(self, mock_get):
        mock_get.return_value = mock_download(
            b'', headers={'Content-Type': 'image/png', 'Content-Length': str(5 * 1024 * 1024)}
        )

        response = self.post_generate(person_url='https://example.com/huge.png', product=upload())

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error_code'], 'VALIDATION_003')


class TestGenerateSafetyBlock(EndpointTestCase):
    outcomes = (make_response(text_part("I can't create that image.")),)

    def test_text_only_response(self):
        response = self.post_generate(person=upload(), product=upload())

        self.assertEqual(response.status_code, 422)
        body = response.get_json()
        self.assertEqual(body['error_code'], 'SAFETY_BLOCK')
        self.assertIn('different scene', body['error'])
        self.assertEqual(body['attempts'], 1)


class TestGenerateQuotaExceeded(EndpointTestCase):
    outcomes = (Exception("429 RESOURCE_EXHAUSTED"), Exception("429 RESOURCE_EXHAUSTED"))

    def test_quota_error_after_retry(self):
        response = self.post_generate(person=upload(), product=upload())

        self.assertEqual(response.status_code, 429)
        body = response.get_json()
        self.assertEqual(body['error_code'], 'QUOTA_EXCEEDED')
        self.assertEqual(body['attempts'], 2)
        self.assertEqual(len(self.fake.calls), 2)


if __name__ == "__main__":
    unittest.main()
