from rest_framework.response import Response


class PaginationMixin:
    """Paginate service results (querysets or plain lists of dataclasses) and serialize them."""

    def paginate_and_respond(self, items, serializer_cls, context=None):
        context = {"request": self.request, **(context or {})}
        page = self.paginate_queryset(items)
        rows = items if page is None else page
        data = serializer_cls(rows, many=True, context=context).data
        if page is None:
            return Response(data)
        return self.get_paginated_response(data)
