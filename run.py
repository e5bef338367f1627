# run.py
from dotenv import load_dotenv

load_dotenv()

from ytprompt import create_app

app = create_app()

if __name__ == '__main__':
    # This is for local development only.
    # Gunicorn will be used in production.
    app.run(debug=True, host='0.0.0.0', port=5000)
