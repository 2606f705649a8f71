"""Console entry-point for the Slack webhook gateway.

Run with:

.. code-block:: bash

    python -m slackend.webhook --port 3000

This delegates to `slackend.webhook.entry.main()`.
"""

from slackend.webhook.entry import main

if __name__ == "__main__":
    main()
