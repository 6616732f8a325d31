"""
Transport modes served on the frontend listener.
"""

MODE_GRPC = "grpc"
MODE_HTTP_CONNECT = "http-connect"

SUPPORTED_MODES = (MODE_GRPC, MODE_HTTP_CONNECT)
