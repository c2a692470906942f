"""
Gemini Service
Prompt composition (structured JSON) and creative image generation
"""
import os
import json
import time
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from google import genai
from google.genai import types

load_dotenv()

from errors import GenerationError, MalformedModelOutputError, NoImageReturnedError
from image_fetcher import ImagePayload
from logging_config import get_logger, get_request_logger

logger = get_logger('gemini')

# Model names
PROMPT_MODEL = os.getenv('PROMPT_MODEL', 'gemini-2.0-flash')
IMAGE_MODEL = os.getenv('IMAGE_MODEL', 'gemini-2.5-flash-image')
REQUEST_TIMEOUT = int(os.getenv('GEMINI_TIMEOUT', 120))

PRODUCT_PROMPT = """Create a vibrant product showcase image featuring the uploaded image
in the center, surrounded by dynamic splashes of liquid or relevant material that complement the product.
Use a clean, colorful background to make the product stand out. Include subtle elements related to the product's flavor,
ingredients, or theme floating around to add context and visual interest.
Ensure the product is sharp and in focus, with motion and energy conveyed through the splash effects.
Also give me an image to video prompt for the same in JSON format: {textToImage:'',imageToVideo:''}. Do not add any raw text or comment, just give JSON
"""

AVATAR_PROMPT = """Create a professional product showcase image
featuring the uploaded avatar naturally holding
the uploaded product image in their hands. Make
the product the clear focal point of the scene.
Use a clean, colorful background that highlights the product.
Include subtle floating elements related to the product's flavor,
ingredients, or theme for added context, if relevant. Ensure both the avatar and product are sharp, well-lit, and in focus,
conveying a polished and professional look. Also give me an image to video prompt for the same
in JSON format: {textToImage:'',imageToVideo:''}. Do not add any raw text or comment, just give JSON
"""

PROMPT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        'textToImage': types.Schema(type=types.Type.STRING),
        'imageToVideo': types.Schema(type=types.Type.STRING),
    },
    required=['textToImage', 'imageToVideo'],
)


@dataclass
class CreativePrompts:
    text_to_image: str
    image_to_video: str


@dataclass
class InlineImage:
    data: bytes
    mime_type: str = 'image/png'


def _get_client(timeout: int = REQUEST_TIMEOUT):
    """
    Initialize and return Gemini client with timeout configuration.

    Args:
        timeout: HTTP request timeout in seconds (default: REQUEST_TIMEOUT)
    """
    api_key = os.getenv('GEMINI_API_KEY')
    if not api_key:
        raise GenerationError('GEMINI_API_KEY environment variable not set')
    return genai.Client(
        api_key=api_key,
        http_options={'timeout': timeout * 1000}  # milliseconds
    )


def select_prompt(use_avatar: bool) -> str:
    return AVATAR_PROMPT if use_avatar else PRODUCT_PROMPT


def parse_creative_prompts(text: Optional[str]) -> CreativePrompts:
    """
    Parse the prompt model output into CreativePrompts.

    Accepts clean JSON, JSON inside Markdown code fences, or JSON surrounded
    by prose (first '{' to last '}').

    Raises:
        MalformedModelOutputError: no parseable object with both string fields
    """
    cleaned = (text or '').strip()
    cleaned = cleaned.replace('```json', '').replace('```', '').strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        start = cleaned.find('{')
        end = cleaned.rfind('}') + 1
        if start < 0 or end <= start:
            raise MalformedModelOutputError('No JSON found in model output')
        try:
            parsed = json.loads(cleaned[start:end])
        except json.JSONDecodeError as e:
            raise MalformedModelOutputError(f'Failed to parse model JSON: {e}')

    if not isinstance(parsed, dict):
        raise MalformedModelOutputError('Model output is not a JSON object')

    text_to_image = parsed.get('textToImage')
    image_to_video = parsed.get('imageToVideo')
    if not isinstance(text_to_image, str) or not isinstance(image_to_video, str):
        raise MalformedModelOutputError('Model output is missing textToImage/imageToVideo')

    return CreativePrompts(text_to_image=text_to_image, image_to_video=image_to_video)


def extract_inline_image(response) -> Optional[InlineImage]:
    """Return the first inline image part of the first candidate, if any."""
    candidates = getattr(response, 'candidates', None) or []
    if not candidates or candidates[0].content is None:
        return None

    for part in candidates[0].content.parts or []:
        inline = getattr(part, 'inline_data', None)
        if inline is not None and inline.data:
            return InlineImage(data=inline.data, mime_type=inline.mime_type or 'image/png')
    return None


class GeminiService:
    """Two-call creative flow: JSON prompt pair, then the rendered image."""

    def __init__(self, client=None, prompt_model: str = PROMPT_MODEL, image_model: str = IMAGE_MODEL):
        self._client = client
        self.prompt_model = prompt_model
        self.image_model = image_model

    @property
    def client(self):
        if self._client is None:
            self._client = _get_client()
        return self._client

    def _generate(self, model: str, contents: list, config=None, request_id: str = None):
        log = get_request_logger('gemini', request_id) if request_id else logger
        start_time = time.time()
        log.debug(f"Calling {model} with {len(contents)} content parts")
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=contents,
                config=config
            )
        except GenerationError:
            raise
        except Exception as e:
            log.error(f"{model} call failed: {str(e)}")
            raise GenerationError(f'{model} call failed: {str(e)}')
        log.debug(f"{model} responded in {time.time() - start_time:.1f}s")
        return response

    def compose_prompts(self, product: ImagePayload, use_avatar: bool,
                        request_id: str = None) -> CreativePrompts:
        """
        First call: ask for the text-to-image and image-to-video prompts.

        Args:
            product: Normalized product image
            use_avatar: Pick the avatar template instead of the plain one
            request_id: Optional request ID for logging

        Returns:
            CreativePrompts
        """
        log = get_request_logger('gemini', request_id) if request_id else logger
        template = select_prompt(use_avatar)
        log.info(f"Composing prompts ({'avatar' if use_avatar else 'product'} template)")

        response = self._generate(
            self.prompt_model,
            [template, product.to_part()],
            config=types.GenerateContentConfig(
                response_mime_type='application/json',
                response_schema=PROMPT_SCHEMA,
            ),
            request_id=request_id
        )
        prompts = parse_creative_prompts(response.text)
        log.debug(f"textToImage: {prompts.text_to_image[:80]}...")
        return prompts

    def generate_creative(self, prompts: CreativePrompts, product: ImagePayload,
                          avatar: Optional[ImagePayload] = None,
                          request_id: str = None) -> InlineImage:
        """
        Second call: render the creative from textToImage and the source images.

        Raises:
            NoImageReturnedError: the response carried no inline image
        """
        log = get_request_logger('gemini', request_id) if request_id else logger
        contents = [prompts.text_to_image, product.to_part()]
        if avatar is not None:
            contents.append(avatar.to_part())

        response = self._generate(
            self.image_model,
            contents,
            config=types.GenerateContentConfig(response_modalities=['IMAGE', 'TEXT']),
            request_id=request_id
        )
        image = extract_inline_image(response)
        if image is None:
            log.error("No image part in Gemini response")
            raise NoImageReturnedError('No image returned from Gemini')

        log.info(f"Creative generated: {len(image.data)} bytes, {image.mime_type}")
        return image
