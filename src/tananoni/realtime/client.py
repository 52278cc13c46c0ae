"""Browser side of the live-reload channel.

The generator writes this script as ``hot_reload.js`` into every route
with hot reload enabled. It opens one WebSocket back to the dev server,
reloads the page on the ``refresh`` token, and reconnects after a fixed
delay whenever the socket closes. Reconnection never gives up and never
backs off.
"""

HOT_RELOAD_FILENAME = "hot_reload.js"
REFRESH_TOKEN = "refresh"
DEFAULT_RELOAD_PATH = "/refresh"
DEFAULT_RECONNECT_MS = 1000

_SCRIPT_TEMPLATE = """(() => {
  let socket, reconnectionTimerId;

  const requestUrl = `${window.location.origin.replace("http", "ws")}__PATH__`;

  connect();

  function log(message) {
    console.info("[refresh] ", message);
  }

  function refresh() {
    window.location.reload();
  }

  function connect(callback) {
    if (socket) {
      socket.close();
    }

    socket = new WebSocket(requestUrl);

    socket.addEventListener("open", callback);

    socket.addEventListener("message", (event) => {
      if (event.data === "__TOKEN__") {
        log("refreshing...");
        refresh();
      }
    });

    // Reconnect after a fixed delay, then reload to pick up the new build.
    socket.addEventListener("close", () => {
      log("connection lost - reconnecting...");

      clearTimeout(reconnectionTimerId);

      reconnectionTimerId = setTimeout(() => {
        connect(refresh);
      }, __RECONNECT_MS__);
    });
  }
})();
"""


def hot_reload_script(
    path: str = DEFAULT_RELOAD_PATH,
    reconnect_ms: int = DEFAULT_RECONNECT_MS,
) -> str:
    """Build the client script for a server listening on ``path``."""
    return (
        _SCRIPT_TEMPLATE.replace("__PATH__", path)
        .replace("__TOKEN__", REFRESH_TOKEN)
        .replace("__RECONNECT_MS__", str(reconnect_ms))
    )


HOT_RELOAD_SCRIPT = hot_reload_script()
