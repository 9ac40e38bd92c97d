from django.urls import path

from patientflow.realtime.consumers import FlowBoardConsumer

websocket_urlpatterns = [
    path("ws/flow/", FlowBoardConsumer.as_asgi()),
]
