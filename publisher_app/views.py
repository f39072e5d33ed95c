import json
import logging

from asgiref.sync import sync_to_async
from django.http import HttpRequest, HttpResponse, HttpResponseBadRequest, HttpResponseNotAllowed
from django.views.decorators.csrf import csrf_exempt

from .errors import PayloadError
from .helpers import parse_push_payload
from .pipeline import PagesPipeline

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ('application/x-www-form-urlencoded', 'multipart/form-data')


def get_pipeline() -> PagesPipeline:
    return PagesPipeline.from_settings()


def _load_payload(request: HttpRequest) -> dict:
    if request.content_type in FORM_CONTENT_TYPES:
        raw = request.POST.get('payload')
        if raw is None:
            raise PayloadError("Form body has no 'payload' field")
    else:
        raw = request.body
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"Payload is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise PayloadError("Payload must be a JSON object")
    return data


@csrf_exempt
async def pages_hook(request: HttpRequest, branch: str) -> HttpResponse:
    if request.method != 'POST':
        return HttpResponseNotAllowed(['POST'])
    try:
        event = parse_push_payload(_load_payload(request))
    except PayloadError as exc:
        logger.warning("Rejected hook for %s: %s", branch, exc)
        return HttpResponseBadRequest()

    if event.branch != branch:
        # only pushes to the branch named in the URL are built
        logger.info("Ignoring push to %s/%s@%s (hook bound to %s)", event.owner, event.repo, event.branch, branch)
        return HttpResponse(status=200)

    pipeline = get_pipeline()
    try:
        result = await sync_to_async(pipeline.run, thread_sensitive=False)(event)
    finally:
        pipeline.close()
    return HttpResponse(status=200 if result.ok else 500)
