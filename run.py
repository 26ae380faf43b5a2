"""
Harmony progress engine entry point.
"""
import os
import sys
import traceback

# Default to production for container deployments
config_name = os.getenv('FLASK_ENV', 'production')
print(f"[Harmony] Config: {config_name}")
print(f"[Harmony] PORT: {os.getenv('PORT', 'not set')}")
print(f"[Harmony] DATABASE_URL: {'set' if os.getenv('DATABASE_URL') else 'NOT SET'}")

try:
    from harmony import create_app
    app = create_app(config_name)
    print(f"[Harmony] App created, routes: {len(list(app.url_map.iter_rules()))}")
except Exception as e:
    print(f"[Harmony] FATAL ERROR during app creation: {e}")
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
