from jshellpanel.cli import main

raise SystemExit(main())
