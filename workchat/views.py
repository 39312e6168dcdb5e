from rest_framework.response import Response
from rest_framework.views import APIView


class PingView(APIView):
    """Health check endpoint"""

    def get(self, request):
        return Response({"message": "Bang"})
