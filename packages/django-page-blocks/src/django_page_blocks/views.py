"""Views for django-page-blocks.

Provides:
- PageView: Template-based page rendering
- PageDocumentAPIView: JSON API for a stored page document
- RenderedPageAPIView: JSON API for rendered blocks and diagnostics
- BlockTypesAPIView: JSON API listing registered block types
- PageEditAPIView: Staff-only JSON API applying editor operations
"""

import json
import logging

from django.http import JsonResponse
from django.shortcuts import render
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .documents import BlockInstance, PageDocument
from .editor import BlockEditor, apply_operation
from .exceptions import DocumentSaveError, InvalidOperationError, UnknownBlockTypeError
from .services import arender_page, list_block_types
from .store import DocumentStore

logger = logging.getLogger(__name__)


def error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"ok": False, "error": {"code": code, "message": message}}, status=status)


class PageView(View):
    """Render a page document with the page template."""

    template_name = "page_blocks/page.html"

    async def get(self, request, page_key):
        page = await arender_page(page_key)
        return render(request, self.template_name, {"page": page, "blocks": page.blocks})


class PageDocumentAPIView(View):
    """JSON API for the raw stored document of a page."""

    async def get(self, request, page_key):
        document = await DocumentStore().aget(page_key) or PageDocument.empty()
        return JsonResponse({
            "ok": True,
            "data": {
                "page_key": page_key,
                "page": document.to_dict(),
            },
        })


class RenderedPageAPIView(View):
    """JSON API for a rendered page."""

    async def get(self, request, page_key):
        page = await arender_page(page_key)
        return JsonResponse({"ok": True, "data": page.to_dict()})


class BlockTypesAPIView(View):
    """JSON API listing registered block types."""

    def get(self, request):
        return JsonResponse({"ok": True, "data": {"block_types": list_block_types()}})


@method_decorator(csrf_exempt, name="dispatch")
class PageEditAPIView(View):
    """Apply a batch of editor operations to a page and commit.

    Body: ``{"operations": [{"op": "add_block", "type": "text"}, ...]}``

    The batch is all-or-nothing: an invalid operation rejects the whole
    request before anything is written.
    """

    def post(self, request, page_key):
        user = request.user
        if not user.is_authenticated:
            return error_response("AUTH_REQUIRED", "Authentication required", 401)
        if not (user.is_staff or user.is_superuser):
            return error_response("ACCESS_DENIED", "Staff access required", 403)

        try:
            body = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            return error_response("INVALID_JSON", "Request body is not valid JSON", 400)

        operations = body.get("operations") if isinstance(body, dict) else None
        if not isinstance(operations, list):
            return error_response("INVALID_OPERATION", "'operations' must be a list", 400)

        editor = BlockEditor(page_key)
        editor.load()

        results = []
        try:
            for op in operations:
                results.append(_serialize_result(apply_operation(editor, op)))
        except UnknownBlockTypeError as e:
            return error_response("UNKNOWN_BLOCK_TYPE", str(e), 400)
        except InvalidOperationError as e:
            return error_response("INVALID_OPERATION", str(e), 400)

        if editor.has_changes:
            try:
                editor.commit()
            except DocumentSaveError as e:
                return error_response("SAVE_FAILED", str(e), 503)
            logger.info(f"Page {page_key!r} edited by {user} ({len(operations)} operations)")

        return JsonResponse({
            "ok": True,
            "data": {
                "page_key": page_key,
                "page": editor.document.to_dict(),
                "results": results,
                "blocks": editor.describe_blocks(),
                "diagnostics": [d.to_dict() for d in editor.diagnostics()],
            },
        })


def _serialize_result(result):
    if isinstance(result, BlockInstance):
        return result.to_dict()
    if isinstance(result, bool):
        return result
    return None
