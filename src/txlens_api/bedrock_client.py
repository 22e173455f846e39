import asyncio
import json
import logging
from collections.abc import Callable, Sequence
from typing import Any

import boto3
import httpx

from .cache import CacheStore, canonical_json, summary_cache_key
from .schemas import TransactionRecord
from .settings import settings

logger = logging.getLogger(__name__)

NO_SUMMARY_AVAILABLE = 'No summary available as there is no transaction record'
SUMMARY_UNAVAILABLE = 'Summary unavailable'
TRIGGER_PROMPT = 'Analyze and draw insights'
SUMMARY_WORD_LIMIT = 60

Invoker = Callable[[str, str], str]


def build_system_instruction(payload: Any) -> str:
    return (
        "You are a language model trained extensively on Solana programs' Interface Description Language. "
        'The JSON data below describes a Solana transaction or a list of transactions. '
        f'Your summary should be a general overview and must not exceed {SUMMARY_WORD_LIMIT} words. '
        'You may only exceed that limit if the data is an array of transactions; in that case write one line per transfer '
        'in the form: <x> tokens transferred from <source_address> to <destination_address>. '
        'Carefully analyze the data and return a concise summary of what happened. '
        'The data is not a list of placeholder inputs: parse it and give insights, and do not invent values. '
        f'Data: {canonical_json(payload)}'
    )


def _invoke_bedrock_boto3(body: dict) -> dict:
    client = boto3.client(
        'bedrock-runtime',
        region_name=settings.aws_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        aws_session_token=settings.aws_session_token,
    )
    response = client.invoke_model(
        modelId=settings.bedrock_model_id,
        contentType='application/json',
        accept='application/json',
        body=json.dumps(body),
    )
    return json.loads(response['body'].read())


def _should_fallback_to_boto3(response: httpx.Response) -> bool:
    if response.status_code < 400:
        return False
    markers = (
        'AccessDeniedException',
        'CallWithBearerToken',
        'not authorized',
    )
    return any(marker in response.text for marker in markers)


def _has_aws_creds() -> bool:
    return bool(settings.aws_access_key_id and settings.aws_secret_access_key)


def invoke_bedrock(system: str, prompt: str) -> str:
    body = {
        'anthropic_version': 'bedrock-2023-05-31',
        'max_tokens': settings.bedrock_max_tokens,
        'temperature': 0.2,
        'system': system,
        'messages': [
            {
                'role': 'user',
                'content': [{'type': 'text', 'text': prompt}],
            }
        ],
    }

    # Prefer AWS credential auth; bearer tokens often lack bedrock:CallWithBearerToken.
    if _has_aws_creds():
        payload = _invoke_bedrock_boto3(body)
    elif settings.bedrock_api_key:
        endpoint = (
            f'https://bedrock-runtime.{settings.aws_region}.amazonaws.com/'
            f'model/{settings.bedrock_model_id}/invoke'
        )
        headers = {
            'Authorization': f'Bearer {settings.bedrock_api_key}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        with httpx.Client(timeout=settings.txlens_timeout_seconds) as client:
            response = client.post(endpoint, headers=headers, content=json.dumps(body))
            if _should_fallback_to_boto3(response):
                payload = _invoke_bedrock_boto3(body)
            else:
                response.raise_for_status()
                payload = response.json()
    else:
        payload = _invoke_bedrock_boto3(body)

    text = ''.join(chunk.get('text', '') for chunk in payload.get('content', []))
    return text.strip()


async def summarize_transactions(
    records: Sequence[TransactionRecord],
    cache: CacheStore,
    invoke: Invoker = invoke_bedrock,
) -> str:
    """Summarize records once per distinct payload.

    Empty input short-circuits to ``NO_SUMMARY_AVAILABLE`` without touching
    the cache or the model. A failed model call is logged and yields
    ``SUMMARY_UNAVAILABLE``; failures are never cached.
    """
    if not records:
        return NO_SUMMARY_AVAILABLE

    payload = [record.payload() for record in records]
    key = summary_cache_key(payload)
    cached = cache.get(key)
    if cached is not None:
        return cached

    try:
        text = await asyncio.to_thread(invoke, build_system_instruction(payload), TRIGGER_PROMPT)
    except Exception as exc:
        logger.error('Bedrock summary failed for %d transaction(s): %s', len(records), exc)
        return SUMMARY_UNAVAILABLE

    await asyncio.to_thread(cache.set, key, text)
    return text
