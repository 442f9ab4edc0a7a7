from agmarknet.main import app
import os

if __name__ == "__main__":
    # Monitor only; crawls run via ``python -m agmarknet.crawler.run``.
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port)
