# pokeshop/views.py
import logging

from django.shortcuts import render

logger = logging.getLogger(__name__)


def page_not_found(request, exception):
    return render(request, "404.html", {"path": request.path}, status=404)


def server_error(request):
    logger.error("Unhandled error while serving %s", request.path)
    return render(request, "500.html", status=500)
