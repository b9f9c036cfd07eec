import os

from neverhappened import create_app, db
from neverhappened.models import Category, Post, Vote, Submission


app = create_app()

debug_mode = os.environ.get("FLASK_DEBUG", "0").lower() in {"true", "1", "t", "yes", "y"}


@app.shell_context_processor
def make_shell_context():
    return {"db": db, "Category": Category, "Post": Post, "Vote": Vote, "Submission": Submission}


if __name__ == "__main__":
    # Local runs only; production goes through a WSGI server
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug_mode)
